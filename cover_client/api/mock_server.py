"""Mock analysis service for local development.

Serves the same routes as the real service from in-memory state, so the
client and the CLI can be exercised without a backend.

Usage:
    cover-client-mock-api                     # Serve on 127.0.0.1:8000
    cover-client-mock-api --scenario errored  # Every analysis errors
    cover-client-mock-api --port 9000
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query, Request

from cover_client.core.status import ENDED_STATUSES, AnalysisStatus

logger = logging.getLogger(__name__)

MOCK_API_VERSION = "1.2.3"

DEFAULT_SETTINGS: Dict[str, Any] = {
    "ignoreDefaults": False,
    "phases": {"phase1": {"timeout": 60, "depth": 1}},
}

SAMPLE_RESULTS: List[Dict[str, Any]] = [
    {
        "testId": "test-1",
        "testName": "playTest",
        "testedFunction": "java::com.diffblue.javademo.TicTacToe.play",
        "sourceFilePath": "com/diffblue/javademo/TicTacToe.java",
        "testBody": "assertEquals(1, new TicTacToe().play(0, 0));",
        "imports": ["com.diffblue.javademo.TicTacToe"],
        "staticImports": ["org.junit.Assert.assertEquals"],
        "classAnnotations": [],
        "tags": ["success"],
        "phaseGenerated": "phase1",
        "coveredLines": ["11", "12"],
    },
    {
        "testId": "test-2",
        "testName": "checkTicTacToePositionTest",
        "testedFunction": "java::com.diffblue.javademo.TicTacToe.checkTicTacToePosition",
        "sourceFilePath": "com/diffblue/javademo/TicTacToe.java",
        "testBody": "assertEquals(0, TicTacToe.checkTicTacToePosition(new int[9]));",
        "imports": ["com.diffblue.javademo.TicTacToe"],
        "staticImports": ["org.junit.Assert.assertEquals"],
        "classAnnotations": [],
        "tags": ["success"],
        "phaseGenerated": "phase1",
        "coveredLines": ["20", "21", "22"],
    },
    {
        "testId": "test-3",
        "testName": "getNameTest",
        "testedFunction": "java::com.diffblue.javademo.serverclient.Player.getName",
        "sourceFilePath": "com/diffblue/javademo/serverclient/Player.java",
        "testBody": "assertNull(new Player().getName());",
        "imports": ["com.diffblue.javademo.serverclient.Player"],
        "staticImports": ["org.junit.Assert.assertNull"],
        "classAnnotations": [],
        "tags": ["assertNull"],
        "phaseGenerated": "phase1",
        "coveredLines": ["8"],
    },
]

SCENARIOS: Dict[str, Dict[str, Any]] = {
    "default": {"results": SAMPLE_RESULTS, "error": None},
    "errored": {
        "results": [],
        "error": {"code": "analysis-failed", "message": "The analysis failed to complete"},
    },
    "empty": {"results": [], "error": None},
}


def _not_found(analysis_id: str) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={"code": "analysis-not-found", "message": f"Analysis {analysis_id} not found"},
    )


def _status_payload(state: Dict[str, Any]) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "status": state["status"].value,
        "progress": {"total": len(state["results"]), "completed": state["delivered"]},
    }
    if state["status"] is AnalysisStatus.ERRORED and state["error"]:
        payload["message"] = dict(state["error"])
    return payload


def create_app(scenario: str = "default", page_size: int = 1) -> FastAPI:
    """Build a mock service app; every started analysis follows ``scenario``."""
    if scenario not in SCENARIOS:
        raise ValueError(f"Unknown scenario '{scenario}'. Valid: {sorted(SCENARIOS)}")
    if page_size < 1:
        raise ValueError(f"page_size must be at least 1, got {page_size}")

    app = FastAPI(title="cover-client mock API", version=MOCK_API_VERSION)
    app.state.scenario = scenario
    app.state.page_size = page_size
    app.state.analyses = {}

    def get_state(analysis_id: str) -> Dict[str, Any]:
        state = app.state.analyses.get(analysis_id)
        if state is None:
            raise _not_found(analysis_id)
        return state

    @app.get("/version")
    async def version():
        return {"version": MOCK_API_VERSION}

    @app.get("/default-settings")
    async def default_settings():
        return DEFAULT_SETTINGS

    @app.put("/scenario/{name}")
    async def set_scenario(name: str):
        if name not in SCENARIOS:
            raise HTTPException(
                status_code=404,
                detail={"code": "scenario-not-found", "message": f"Scenario {name} does not exist"},
            )
        app.state.scenario = name
        logger.info(f"Mock scenario set to {name}")
        return {"scenario": name}

    @app.post("/analysis")
    async def start_analysis(request: Request):
        content_type = request.headers.get("content-type", "")
        body = await request.body()
        if not content_type.startswith("multipart/form-data") or b'name="build"' not in body:
            raise HTTPException(
                status_code=400,
                detail={"code": "build-missing", "message": "A multipart `build` part is required"},
            )
        analysis_id = uuid.uuid4().hex
        preset = SCENARIOS[app.state.scenario]
        app.state.analyses[analysis_id] = {
            "status": AnalysisStatus.QUEUED,
            "results": list(preset["results"]),
            "error": preset["error"],
            "delivered": 0,
        }
        logger.info(f"Mock analysis {analysis_id} started ({app.state.scenario})")
        return {"id": analysis_id, "phases": DEFAULT_SETTINGS["phases"], "settings": DEFAULT_SETTINGS}

    @app.get("/analysis/{analysis_id}")
    async def analysis_results(analysis_id: str, cursor: Optional[str] = Query(default=None)):
        state = get_state(analysis_id)
        try:
            start = int(cursor) if cursor is not None else 0
        except ValueError:
            raise HTTPException(
                status_code=400,
                detail={"code": "invalid-cursor", "message": f"Invalid cursor {cursor}"},
            )

        if state["status"] not in ENDED_STATUSES:
            if state["error"]:
                state["status"] = AnalysisStatus.ERRORED
            else:
                state["status"] = AnalysisStatus.RUNNING

        page: List[Dict[str, Any]] = []
        if state["status"] is not AnalysisStatus.ERRORED:
            page = state["results"][start:start + app.state.page_size]
        next_cursor = start + len(page)
        state["delivered"] = max(state["delivered"], next_cursor)

        if state["status"] is AnalysisStatus.RUNNING and state["delivered"] >= len(state["results"]):
            state["status"] = AnalysisStatus.COMPLETED

        return {"cursor": next_cursor, "status": _status_payload(state), "results": page}

    @app.get("/analysis/{analysis_id}/status")
    async def analysis_status(analysis_id: str):
        return _status_payload(get_state(analysis_id))

    @app.post("/analysis/{analysis_id}/cancel")
    async def cancel_analysis(analysis_id: str):
        state = get_state(analysis_id)
        if state["status"] in ENDED_STATUSES:
            message = f"Analysis already {state['status'].value.lower()}"
        else:
            state["status"] = AnalysisStatus.CANCELED
            message = "Analysis canceled"
        return {"message": message, "status": _status_payload(state)}

    return app


def run():
    """Run the mock API server."""
    import argparse
    import uvicorn

    parser = argparse.ArgumentParser(description="cover-client mock API server")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8000, help="Port to listen on")
    parser.add_argument("--scenario", default="default", choices=sorted(SCENARIOS), help="Scenario for new analyses")
    parser.add_argument("--page-size", type=int, default=1, help="Results per page")
    args = parser.parse_args()

    print(f"Starting mock API server on http://{args.host}:{args.port} (scenario: {args.scenario})")

    uvicorn.run(
        create_app(args.scenario, args.page_size),
        host=args.host,
        port=args.port,
    )


if __name__ == "__main__":
    run()
