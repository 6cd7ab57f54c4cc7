"""
HTTP host for the schema augmentation service.
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from dbml_augment import __version__
from dbml_augment.models import ServiceConfig
from dbml_augment.service.diagram import DbDiagramClient
from dbml_augment.service.errors import SchemaServiceError
from dbml_augment.service.handler import SchemaRequestHandler


INVALID_BODY_MESSAGE = "Request body must be a JSON object with string fields"


class SchemaRequest(BaseModel):
    url: Optional[str] = None


class DiagramRequest(BaseModel):
    dbml: Optional[str] = None


def create_app(
    config: Optional[ServiceConfig] = None,
    handler: Optional[SchemaRequestHandler] = None,
    diagram_client: Optional[DbDiagramClient] = None,
) -> FastAPI:
    """Build the FastAPI app; collaborators can be injected for testing."""
    config = config or ServiceConfig.load()
    handler = handler or SchemaRequestHandler(config)
    diagram_client = diagram_client or DbDiagramClient(config)

    app = FastAPI(title="DBML Relationship Augmentation Service", version=__version__)

    @app.exception_handler(RequestValidationError)
    async def invalid_body_handler(request: Request, exc: RequestValidationError):
        # Malformed JSON or wrongly typed fields count as missing input
        return JSONResponse({"error": INVALID_BODY_MESSAGE}, status_code=400)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.post("/api/schema")
    def schema_endpoint(req: SchemaRequest):
        """Fetch a schema for `url` and append inferred relationships."""
        status_code, payload = handler.handle(req.url)
        return JSONResponse(payload, status_code=status_code)

    @app.post("/api/diagram")
    def diagram_endpoint(req: DiagramRequest):
        """Create an embeddable dbdiagram.io diagram for `dbml`."""
        try:
            link = diagram_client.create(req.dbml or "")
        except SchemaServiceError as e:
            return JSONResponse(e.to_dict(), status_code=e.status_code)
        except Exception as e:
            return JSONResponse({"error": str(e) or "An unknown error occurred"}, status_code=500)
        return link.to_dict()

    return app
