"""Run the registry with uvicorn: python -m schema_registry"""
import uvicorn

from schema_registry.config import Settings
from schema_registry.main import create_app


def main() -> None:
    settings = Settings()
    uvicorn.run(create_app(settings), host=settings.API_HOST, port=settings.API_PORT)


if __name__ == "__main__":
    main()
