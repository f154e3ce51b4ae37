"""
FastAPI backend for the money-flow tracer.
Exposes the trace as a single POST endpoint returning the dashboard's FlowResult JSON.
"""
import logging
from datetime import datetime
from typing import Optional, Union

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt

from flowtrace.adapters.chain.etherscan_history_adapter import EtherscanHistoryAdapter
from flowtrace.config import settings
from flowtrace.core.errors import DataSourceError, InvalidFlowRequest, TraceTimeoutError
from flowtrace.io.schemas import error_to_dict, flow_result_to_dict
from flowtrace.ports.transaction_history_port import TransactionHistoryPort
from flowtrace.services.flow_request import run_flow_request

logger = logging.getLogger(__name__)


class FlowRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_address: Optional[str] = Field(None, alias="from")
    to_address: Optional[str] = Field(None, alias="to")
    chain: Optional[str] = None
    # strict so JSON true is not coerced to 1; integrality is checked by build_flow_query
    max_hops: Optional[Union[StrictInt, StrictFloat]] = Field(None, alias="maxHops")


def create_app(
    history: Optional[TransactionHistoryPort] = None,
    timeout_sec: Optional[float] = settings.FLOW_TRACE_TIMEOUT_SEC,
) -> FastAPI:
    app = FastAPI(title="Flow Tracer API", version="0.1.0")
    app.state.history = history

    def _history() -> TransactionHistoryPort:
        # built on first use so importing the app needs no API key
        if app.state.history is None:
            app.state.history = EtherscanHistoryAdapter()
        return app.state.history

    @app.exception_handler(RequestValidationError)
    async def _invalid_body(request: Request, exc: RequestValidationError):
        return JSONResponse(error_to_dict(f"Invalid request body: {exc.errors()}"), status_code=400)

    @app.post("/api/trace/flow")
    def trace_flow(body: FlowRequest):
        payload = body.model_dump(by_alias=True)
        try:
            result = run_flow_request(payload, _history(), timeout_sec=timeout_sec)
        except InvalidFlowRequest as e:
            return JSONResponse(error_to_dict(str(e)), status_code=400)
        except TraceTimeoutError as e:
            logger.error("Flow trace timed out: %s", e)
            return JSONResponse(error_to_dict(str(e)), status_code=504)
        except DataSourceError as e:
            logger.error("Flow trace data source error: %s", e)
            return JSONResponse(error_to_dict(str(e)), status_code=502)
        except Exception as e:
            logger.exception("Flow trace failed")
            return JSONResponse(error_to_dict(str(e) or "Failed to trace flow"), status_code=500)

        return flow_result_to_dict(result)

    @app.get("/api/health")
    def health():
        return {
            "status": "healthy",
            "timestamp": datetime.now().isoformat(),
            "version": "0.1.0",
        }

    return app


app = create_app()


def main():
    """Run the API server."""
    import uvicorn

    logging.basicConfig(level=settings.LOG_LEVEL)
    uvicorn.run(
        "flowtrace.api.app:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
    )


if __name__ == "__main__":
    main()
