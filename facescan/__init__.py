"""facescan backend: account lifecycle, bearer sessions and API keys."""
