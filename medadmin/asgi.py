"""ASGI entrypoint: uvicorn medadmin.asgi:app"""

from medadmin.main import create_app

app = create_app()
