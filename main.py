"""
ASGI entry point: ``uvicorn main:app``.
"""
from src.api.app import create_app

app = create_app()

if __name__ == "__main__":
    from src.main import serve
    serve()
