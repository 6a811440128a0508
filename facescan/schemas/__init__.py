"""Request bodies accepted by the public routers."""
