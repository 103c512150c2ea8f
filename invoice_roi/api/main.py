"""
Invoice ROI REST API - FastAPI Application.

Provides REST endpoints for ROI simulation, saved scenarios and reports.

Endpoints:
    GET    /                         - API info
    GET    /health                   - Health check (includes store status)
    POST   /api/simulate             - Run a simulation
    GET    /api/scenarios            - List saved scenarios, newest first
    POST   /api/scenarios            - Save a named scenario
    GET    /api/scenarios/{id}       - Get a saved scenario
    DELETE /api/scenarios/{id}       - Delete a saved scenario
    POST   /api/report/generate      - Render a PDF report and e-mail it

Usage:
    uvicorn invoice_roi.api.main:create_app --factory --reload --port 8000
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Iterator, List, Mapping, Optional

from fastapi import BackgroundTasks, Body, Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .. import __version__
from ..core.config import Settings, get_settings
from ..db import (
    EmailCaptureRepository,
    ScenarioNotFoundError,
    ScenarioRepository,
    ScenarioStoreError,
    StoreClient,
    check_connection,
    create_store_client,
    validate_scenario_name,
)
from ..notify import ReportMailer, dispatch_report_email, is_valid_email
from ..reporting import PDFReportGenerator, ReportRenderError
from ..roi import (
    InputValidationError,
    calculate_roi,
    parse_inputs,
    simulate,
    validate_inputs,
)
from ..utils.logging_config import ensure_logging

logger = logging.getLogger(__name__)


# =============================================================================
# PYDANTIC MODELS
# =============================================================================

class ROIInputsModel(BaseModel):
    """Validated simulation inputs."""
    monthly_invoice_volume: float = Field(..., examples=[1000])
    num_ap_staff: float = Field(..., examples=[3])
    avg_hours_per_invoice: float = Field(..., examples=[0.5])
    hourly_wage: float = Field(..., examples=[25])
    error_rate_manual: float = Field(..., description="Manual error rate (%)", examples=[5])
    error_cost: float = Field(..., examples=[50])
    time_horizon_months: float = Field(..., examples=[12])
    one_time_implementation_cost: float = Field(0, examples=[5000])


class ROIResultsModel(BaseModel):
    """Computed simulation results."""
    monthly_savings: float
    payback_months: Optional[float] = None
    roi_percentage: float
    cumulative_savings: float
    net_savings: float
    error_savings: float
    labor_cost_saved: float
    automation_cost: float
    labor_cost_manual: float
    baseline_error_cost: float
    automation_error_cost: float
    bias_multiplier: float


class SimulationResponse(BaseModel):
    """Response from the simulate endpoint."""
    results: ROIResultsModel
    inputs: ROIInputsModel
    constants: Dict[str, float]


class ScenarioResponse(BaseModel):
    """A saved scenario."""
    id: str
    name: str
    data: ROIInputsModel
    results: ROIResultsModel
    created_at: Optional[str] = None


class ValidationErrorResponse(BaseModel):
    """Returned with status 400 when inputs are invalid."""
    errors: List[str]


# =============================================================================
# DEPENDENCIES
# =============================================================================

def _require_object(payload: Any) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise InputValidationError(["request body must be an object"])
    return payload


def get_store_client(request: Request) -> StoreClient:
    return request.app.state.store_client


def get_scenario_repository(
    client: StoreClient = Depends(get_store_client),
) -> Iterator[ScenarioRepository]:
    """Request-scoped repository over the application's store client."""
    repo = ScenarioRepository(client)
    try:
        yield repo
    finally:
        logger.debug("Released scenario repository")


def get_email_capture_repository(
    client: StoreClient = Depends(get_store_client),
) -> EmailCaptureRepository:
    return EmailCaptureRepository(client)


def get_mailer(request: Request) -> ReportMailer:
    return request.app.state.mailer


def get_report_generator(request: Request) -> PDFReportGenerator:
    return request.app.state.report_generator


# =============================================================================
# FASTAPI APPLICATION
# =============================================================================

def create_app(
    settings: Optional[Settings] = None,
    store_client: Optional[StoreClient] = None,
    mailer: Optional[ReportMailer] = None,
    report_generator: Optional[PDFReportGenerator] = None,
) -> FastAPI:
    """
    Build the API application.

    Collaborators not passed in are created from settings when the app
    starts and released when it stops.
    """
    settings = settings or get_settings()
    ensure_logging(settings.log_level, log_to_file=settings.log_to_file, log_dir=settings.log_dir)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_store = store_client is None
        app.state.settings = settings
        app.state.store_client = store_client or create_store_client(settings)
        app.state.mailer = mailer or ReportMailer.from_settings(settings)
        app.state.report_generator = report_generator or PDFReportGenerator()
        logger.info(
            f"API started (store={app.state.store_client.backend}, "
            f"mail={'enabled' if app.state.mailer.is_enabled() else 'disabled'})"
        )
        try:
            yield
        finally:
            if owns_store:
                app.state.store_client.close()
            logger.info("API stopped")

    app = FastAPI(
        title="Invoice ROI API",
        description="Invoice Automation ROI Simulator",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # ERROR HANDLERS
    # =========================================================================

    @app.exception_handler(InputValidationError)
    async def input_validation_handler(request: Request, exc: InputValidationError):
        logger.info(
            f"Validation failed with {len(exc.errors)} error(s)",
            extra={"request_path": request.url.path},
        )
        return JSONResponse(status_code=400, content={"errors": exc.errors})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        # Malformed or missing JSON bodies
        errors = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        ]
        logger.info(
            f"Rejected malformed request with {len(errors)} error(s)",
            extra={"request_path": request.url.path},
        )
        return JSONResponse(status_code=400, content={"errors": errors})

    @app.exception_handler(ScenarioNotFoundError)
    async def not_found_handler(request: Request, exc: ScenarioNotFoundError):
        return JSONResponse(status_code=404, content={"detail": "Scenario not found"})

    @app.exception_handler(ScenarioStoreError)
    async def store_error_handler(request: Request, exc: ScenarioStoreError):
        logger.error(f"Store error: {exc}", extra={"request_path": request.url.path})
        return JSONResponse(
            status_code=500,
            content={"error": "Scenario store failure", "message": str(exc)},
        )

    @app.exception_handler(ReportRenderError)
    async def render_error_handler(request: Request, exc: ReportRenderError):
        logger.error(f"Report error: {exc}", extra={"request_path": request.url.path})
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to generate report", "message": str(exc)},
        )

    # =========================================================================
    # ENDPOINTS
    # =========================================================================

    @app.get("/", tags=["General"])
    async def root():
        """API info."""
        return {
            "name": "Invoice ROI API",
            "version": __version__,
            "description": "Invoice Automation ROI Simulator",
            "status": "healthy",
            "endpoints": {
                "simulate": "POST /api/simulate",
                "list_scenarios": "GET /api/scenarios",
                "create_scenario": "POST /api/scenarios",
                "get_scenario": "GET /api/scenarios/{scenario_id}",
                "delete_scenario": "DELETE /api/scenarios/{scenario_id}",
                "generate_report": "POST /api/report/generate",
            },
            "documentation": "/docs",
        }

    @app.get("/health", tags=["General"])
    def health_check(client: StoreClient = Depends(get_store_client)):
        """Health check, including scenario store reachability."""
        store_ok = check_connection(client)
        return {
            "status": "healthy" if store_ok else "degraded",
            "version": __version__,
            "store": {"backend": client.backend, "connected": store_ok},
        }

    @app.post(
        "/api/simulate",
        response_model=SimulationResponse,
        responses={400: {"model": ValidationErrorResponse}},
        tags=["Simulation"],
    )
    async def run_simulation(payload: Any = Body(...)):
        """Validate inputs and compute ROI results."""
        return simulate(_require_object(payload))

    @app.get("/api/scenarios", response_model=List[ScenarioResponse], tags=["Scenarios"])
    def list_scenarios(repo: ScenarioRepository = Depends(get_scenario_repository)):
        """List saved scenarios, newest first."""
        return [s.to_json() for s in repo.list()]

    @app.post(
        "/api/scenarios",
        response_model=ScenarioResponse,
        status_code=201,
        responses={400: {"model": ValidationErrorResponse}},
        tags=["Scenarios"],
    )
    def create_scenario(
        payload: Any = Body(...),
        repo: ScenarioRepository = Depends(get_scenario_repository),
    ):
        """Compute results for the inputs and save them under a name."""
        payload = _require_object(payload)
        name = payload.get("name")
        data = payload.get("data")

        errors = []
        name_error = validate_scenario_name(name)
        if name_error:
            errors.append(name_error)
        errors.extend(validate_inputs(data))
        if errors:
            raise InputValidationError(errors)

        inputs = parse_inputs(data)
        scenario = repo.create(name, inputs, calculate_roi(inputs))
        return scenario.to_json()

    @app.get("/api/scenarios/{scenario_id}", response_model=ScenarioResponse, tags=["Scenarios"])
    def get_scenario(
        scenario_id: str,
        repo: ScenarioRepository = Depends(get_scenario_repository),
    ):
        """Get a saved scenario by ID."""
        return repo.get(scenario_id).to_json()

    @app.delete("/api/scenarios/{scenario_id}", status_code=204, tags=["Scenarios"])
    def delete_scenario(
        scenario_id: str,
        repo: ScenarioRepository = Depends(get_scenario_repository),
    ):
        """Delete a saved scenario."""
        repo.delete(scenario_id)
        return Response(status_code=204)

    @app.post(
        "/api/report/generate",
        response_class=Response,
        responses={
            200: {"content": {"application/pdf": {}}},
            400: {"model": ValidationErrorResponse},
        },
        tags=["Reports"],
    )
    def generate_report(
        background_tasks: BackgroundTasks,
        payload: Any = Body(...),
        captures: EmailCaptureRepository = Depends(get_email_capture_repository),
        mailer: ReportMailer = Depends(get_mailer),
        generator: PDFReportGenerator = Depends(get_report_generator),
    ):
        """
        Render a PDF report for the inputs and e-mail it.

        The PDF is returned directly. E-mail delivery happens after the
        response and its failure does not affect the request.
        """
        payload = _require_object(payload)
        email = payload.get("email")
        scenario_data = payload.get("scenario_data")

        errors = []
        if not is_valid_email(email):
            errors.append("email must be a valid e-mail address")
        errors.extend(validate_inputs(scenario_data))
        if errors:
            raise InputValidationError(errors)

        inputs = parse_inputs(scenario_data)
        results = calculate_roi(inputs)

        captures.capture(email)
        pdf_bytes = generator.generate(inputs, results)

        background_tasks.add_task(dispatch_report_email, mailer, email, inputs, results, pdf_bytes)

        return Response(
            content=pdf_bytes,
            media_type="application/pdf",
            headers={"Content-Disposition": "attachment; filename=roi-report.pdf"},
        )

    return app


# =============================================================================
# CLI ENTRY POINT
# =============================================================================

def main():
    """Run the API server."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "invoice_roi.api.main:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
    )
    return 0


if __name__ == "__main__":
    import sys
    sys.exit(main())
