"""Pipeline orchestration for init/compile/watch flows."""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Mapping, Optional

from .compiler.codegen import ScriptRenderer, default_renderer
from .compiler.registry import ComponentRegistry, load_component
from .compiler.resolver import ComponentResolver
from .config import GtmlConfig, load_config
from .errors import CompileError
from .logging import get_logger
from .models import BuildReport, ProjectManifest
from .postproc.assets import PageAssembler, stylesheet_href
from .project_scanner import ProjectScanner
from .scaffold import write_scaffold
from .watcher import ProjectWatcher


@dataclass
class RenderOutcome:
    """Result of compiling an in-memory snippet."""

    html: str
    css: str
    js: str


class Orchestrator:
    """Coordinates project scaffolding, compilation and watching."""

    def __init__(
        self,
        scanner: ProjectScanner | None = None,
        assembler: PageAssembler | None = None,
        renderer: ScriptRenderer | None = None,
        watcher_factory: Optional[Callable[..., ProjectWatcher]] = None,
    ) -> None:
        self.scanner = scanner or ProjectScanner()
        self.assembler = assembler or PageAssembler()
        self._renderer = renderer
        self.watcher_factory = watcher_factory or ProjectWatcher
        self.logger = get_logger("orchestrator")

    def run_init(self, path: str, *, force: bool = False) -> Path:
        """Scaffold a new project at ``path``."""
        root = Path(path).expanduser().resolve()
        if root.exists() and not force:
            raise FileExistsError(f"Directory '{path}' already exists. Use --force to overwrite.")
        self.logger.info("Initializing project at %s", root)
        written = write_scaffold(root)
        for target in written:
            self.logger.debug("Wrote %s", target.relative_to(root).as_posix())
        return root

    def run_compile(self, path: str) -> BuildReport:
        """Compile every route of the project at ``path`` into its dist directory."""
        root = Path(path).expanduser().resolve()
        if not root.is_dir():
            raise FileNotFoundError(f"Project path not found: {path}")
        config = load_config(root)
        self.logger.info("Compiling project at %s", root)
        manifest = self.scanner.scan(str(root), config)
        registry = self._load_registry(manifest)
        self.logger.info("Loaded %d component(s)", len(registry))

        resolver = ComponentResolver(
            registry,
            strict_props=config.compiler.strict_props,
            max_depth=config.compiler.max_depth,
            renderer=self._resolve_renderer(config),
        )
        stylesheet_relative = f"{config.paths.static}/{config.compiler.stylesheet}"
        dist = config.dist_dir

        written: List[Path] = []
        for route in manifest.routes:
            source = Path(route.path)
            try:
                result = resolver.compile(source.read_text(encoding="utf-8"))
            except CompileError as exc:
                raise exc.with_source(self._display_path(source, root)) from None
            html = result.html
            if config.compiler.inject_assets:
                html = self.assembler.assemble(
                    html,
                    href=stylesheet_href(route.relative, stylesheet_relative),
                    script=resolver.page_script(result),
                )
            target = dist / route.relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(html, encoding="utf-8")
            written.append(target)
            self.logger.debug("Wrote %s", target)
        self.logger.info("Wrote %d route(s) to %s", len(written), dist)

        css = registry.stylesheet()
        stylesheet = dist / stylesheet_relative
        stylesheet.parent.mkdir(parents=True, exist_ok=True)
        stylesheet.write_text(css, encoding="utf-8")
        self.logger.info("Wrote %d bytes of CSS to %s", len(css.encode("utf-8")), stylesheet)

        static_dist = dist / config.paths.static
        for static_file in manifest.static_files:
            target = static_dist / static_file.relative
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(static_file.path, target)
        if manifest.static_files:
            self.logger.info("Copied %d static file(s)", len(manifest.static_files))

        return BuildReport(
            root=root,
            dist=dist,
            routes=written,
            stylesheet=stylesheet,
            components=len(registry),
            static_files=len(manifest.static_files),
        )

    def run_watch(self, path: str, *, max_polls: Optional[int] = None) -> None:
        """Compile the project, then recompile whenever a source file changes."""
        root = Path(path).expanduser().resolve()
        config = load_config(root)
        watcher = self.watcher_factory(
            root,
            lambda: self.run_compile(str(root)),
            interval=config.watch.interval,
            ignore=config.dist_dir,
        )
        watcher.run(max_polls=max_polls)

    def render(
        self,
        html: str,
        components: Mapping[str, str] | None = None,
        *,
        strict_props: bool = False,
    ) -> RenderOutcome:
        """Compile ``html`` against an in-memory ``name -> template`` component map."""
        registry = ComponentRegistry()
        for name, raw in (components or {}).items():
            try:
                registry.add(load_component(name, raw))
            except CompileError as exc:
                raise exc.with_source(name) from None
        resolver = ComponentResolver(
            registry, strict_props=strict_props, renderer=self._resolve_renderer(None)
        )
        result = resolver.compile(html)
        return RenderOutcome(
            html=result.html,
            css=registry.stylesheet(),
            js=resolver.page_script(result),
        )

    def _load_registry(self, manifest: ProjectManifest) -> ComponentRegistry:
        registry = ComponentRegistry()
        root = Path(manifest.root)
        for source in manifest.components:
            path = Path(source.path)
            display = self._display_path(path, root)
            try:
                component = load_component(
                    source.name, path.read_text(encoding="utf-8"), path=display
                )
                registry.add(component)
            except CompileError as exc:
                raise exc.with_source(display) from None
            self.logger.debug("Loaded component %s from %s", component.name, display)
        return registry

    def _resolve_renderer(self, config: GtmlConfig | None) -> ScriptRenderer:
        if self._renderer is not None:
            return self._renderer
        if config is not None and config.compiler.templates_dir is not None:
            return ScriptRenderer(config.compiler.templates_dir)
        return default_renderer()

    @staticmethod
    def _display_path(path: Path, root: Path) -> str:
        try:
            return path.relative_to(root).as_posix()
        except ValueError:
            return str(path)


__all__ = ["Orchestrator", "RenderOutcome"]
