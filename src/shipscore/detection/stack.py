"""Stack Detector: infer the technology stack from manifests and the index."""

from __future__ import annotations

from ..logging_config import get_logger
from ..models import NONE_DETECTED, StackDetection
from ..scanning import FileIndex, load_package_manifest, read_python_dependencies

logger = get_logger(__name__)

# package.json dependency -> technology name, in detection order.
NODE_TECHNOLOGIES: tuple[tuple[str, str], ...] = (
    ("next", "Next.js"),
    ("react", "React"),
    ("vue", "Vue.js"),
    ("svelte", "Svelte"),
    ("express", "Express"),
    ("fastify", "Fastify"),
    ("vite", "Vite"),
    ("webpack", "Webpack"),
    ("tailwindcss", "Tailwind CSS"),
)

PYTHON_FRAMEWORKS: tuple[tuple[str, str], ...] = (
    ("django", "Django"),
    ("flask", "Flask"),
    ("fastapi", "FastAPI"),
)

# Priority order; only direct dependencies count for the framework.
FRAMEWORK_PRIORITY: tuple[tuple[str, str], ...] = (
    ("next", "Next.js"),
    ("react", "React"),
    ("vue", "Vue.js"),
    ("svelte", "Svelte"),
)

BUILD_TOOL_PRIORITY: tuple[tuple[str, str], ...] = (
    ("vite", "Vite"),
    ("webpack", "Webpack"),
)

DOCKER_FILES = ("Dockerfile", "docker-compose.yml", "docker-compose.yaml", "compose.yaml")
STATIC_MARKUP = "index.html"
TSCONFIG = "tsconfig.json"


def detect_stack(index: FileIndex) -> StackDetection:
    """
    Detect technologies, framework and build tool for an indexed workspace.

    Pure over the index: the same tree always yields the same detection.
    """
    technologies: list[str] = []

    def add(name: str) -> None:
        if name not in technologies:
            technologies.append(name)

    manifest = load_package_manifest(index)
    if manifest.present:
        add("Node.js")
        for dependency, name in NODE_TECHNOLOGIES:
            if manifest.declares(dependency):
                add(name)
        if manifest.declares("typescript") or index.exists(TSCONFIG):
            add("TypeScript")

    python_deps = read_python_dependencies(index)
    if any(index.exists(name) for name in ("requirements.txt", "pyproject.toml")):
        add("Python")
        for needle, name in PYTHON_FRAMEWORKS:
            if needle in python_deps:
                add(name)

    has_dockerfile = index.exists("Dockerfile")
    if any(index.exists(name) for name in DOCKER_FILES):
        add("Docker")

    if index.exists(STATIC_MARKUP) and "React" not in technologies and "Vue.js" not in technologies:
        add("Static HTML")

    framework = next(
        (name for dep, name in FRAMEWORK_PRIORITY if dep in manifest.dependencies),
        NONE_DETECTED,
    )

    build_tool = next(
        (name for dep, name in BUILD_TOOL_PRIORITY if manifest.declares(dep)),
        NONE_DETECTED,
    )
    if build_tool == NONE_DETECTED and manifest.has_script("build"):
        build_tool = "npm scripts"

    has_typescript = index.exists(TSCONFIG) or bool(index.find((".ts", ".tsx")))

    detection = StackDetection(
        technologies=tuple(technologies),
        has_package_json=manifest.present,
        has_dockerfile=has_dockerfile,
        has_typescript=has_typescript,
        framework=framework,
        build_tool=build_tool,
    )
    logger.debug(
        "Detected stack: %s (framework=%s, build=%s)",
        ", ".join(technologies) or NONE_DETECTED,
        framework,
        build_tool,
    )
    return detection
