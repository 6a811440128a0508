"""
FastAPI routers grouped by domain (auth, api keys).

Each module exposes an APIRouter included by `facescan.app.create_app`.
Routers translate HTTP bodies into service calls; error translation lives in
`facescan.exception_handlers`.
"""
