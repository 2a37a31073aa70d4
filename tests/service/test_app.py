"""Tests for the FastAPI service mode."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Mapping

import pytest
from fastapi.testclient import TestClient

from gtml.errors import ComponentNotFoundError
from gtml.models import BuildReport
from gtml.orchestrator import RenderOutcome
from gtml.service.app import create_app


class _StubOrchestrator:
    def __init__(self) -> None:
        self.compile_calls: List[str] = []
        self.render_calls: List[Dict[str, object]] = []

    def run_compile(self, path: str) -> BuildReport:
        self.compile_calls.append(path)
        if path == "missing":
            raise FileNotFoundError("Project path not found: missing")
        root = Path(path)
        return BuildReport(
            root=root,
            dist=root / "dist",
            routes=[root / "dist" / "index.html"],
            stylesheet=root / "dist" / "static" / "styles.css",
            components=2,
            static_files=1,
        )

    def render(
        self,
        html: str,
        components: Mapping[str, str] | None = None,
        *,
        strict_props: bool = False,
    ) -> RenderOutcome:
        self.render_calls.append(
            {"html": html, "components": dict(components or {}), "strict_props": strict_props}
        )
        if "<Missing" in html:
            raise ComponentNotFoundError("component 'Missing' not found", "Missing")
        return RenderOutcome(html="<p>ok</p>", css="", js="")


@pytest.fixture
def orchestrator() -> _StubOrchestrator:
    return _StubOrchestrator()


@pytest.fixture
def client(orchestrator: _StubOrchestrator) -> TestClient:
    return TestClient(create_app(lambda: orchestrator))  # type: ignore[arg-type, return-value]


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_compile_endpoint(client: TestClient, orchestrator: _StubOrchestrator) -> None:
    response = client.post("/compile", json={"path": "site"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["dist"] == str(Path("site") / "dist")
    assert payload["routes"] == [str(Path("site") / "dist" / "index.html")]
    assert payload["stylesheet"] == str(Path("site") / "dist" / "static" / "styles.css")
    assert payload["components"] == 2
    assert payload["static_files"] == 1
    assert orchestrator.compile_calls == ["site"]


def test_compile_missing_project_returns_404(client: TestClient) -> None:
    response = client.post("/compile", json={"path": "missing"})

    assert response.status_code == 404
    assert "Project path not found" in response.json()["detail"]


def test_render_endpoint(client: TestClient, orchestrator: _StubOrchestrator) -> None:
    response = client.post(
        "/render",
        json={"html": "<Card />", "components": {"Card": "<p>x</p>"}, "strict_props": True},
    )

    assert response.status_code == 200
    assert response.json() == {"html": "<p>ok</p>", "css": "", "js": ""}
    assert orchestrator.render_calls == [
        {"html": "<Card />", "components": {"Card": "<p>x</p>"}, "strict_props": True}
    ]


def test_render_compile_error_returns_400(client: TestClient) -> None:
    response = client.post("/render", json={"html": "<Missing />"})

    assert response.status_code == 400
    assert response.json() == {"detail": "component 'Missing' not found"}


def test_render_against_real_orchestrator() -> None:
    client = TestClient(create_app())

    response = client.post(
        "/render",
        json={
            "html": "<Greeting name='World' />",
            "components": {"Greeting": "<h1 props='name string'>Hello {name}</h1>"},
        },
    )

    assert response.status_code == 200
    assert response.json()["html"] == '<h1 data-greeting="">Hello World</h1>'
