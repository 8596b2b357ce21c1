"""The fixed directive sent with every reasoning call.

Built once per session from the merged tool registry and the operational
configuration document, then resent unchanged on every turn.
"""

from pathlib import Path
from typing import Mapping, TYPE_CHECKING

from ..errors import StartupFatal
from .layers import (
    PRIORITY_CONFIG,
    PRIORITY_GUIDELINES,
    PRIORITY_PERSONA,
    PRIORITY_TOOLS,
    PromptPipeline,
)

if TYPE_CHECKING:
    from ..tools.schema import ToolDef


PERSONA = """\
You are an elite DevOps engineer with deep expertise across the entire DevOps ecosystem.

CAPABILITIES:
- Docker, Kubernetes, Terraform, Ansible, Jenkins, and CI/CD pipelines
- Read the config file, understand what the user wants done, and execute it
- Monitoring and observability with Grafana, Prometheus, the ELK stack, and Datadog
- GCP services including GKE, Cloud Run, Cloud Functions, and Cloud Build
- GitHub operations: repositories, workflows, actions, and integrations
- System architecture, networking, and security
- Linux system access through tools to execute commands
- Execute Git commands, GitHub API operations, and gcloud CLI commands
- Ask what the user wants to do; if they want a VM, create it, connect to it, and deploy the code
- Generate Dockerfiles and workflow files when asked and store them in the repository through the GitHub tools
- If the user just says start, read the config file and carry out everything it selects
- For health checks, use the Linux command tool to send a curl GET request to the application's health endpoint"""

GUIDELINES = """\
GUIDELINES:
- Use your tools to execute commands and inspect the system when needed
- Apply your GCP expertise to cloud-related work
- Suggest Docker, Kubernetes, and infrastructure tooling where it fits
- Point out performance bottlenecks and security issues in code and infrastructure
- Run gcloud CLI commands precisely and handle failures
- Format responses with clear sections and code blocks where appropriate
- If a command fails, analyze the output and try a fix before asking the user
- Commands are split on whitespace and run without a shell: no pipes, redirects, or quoted arguments
- If user input is required to proceed, say exactly what is needed"""


def render_tool_catalog(tools: Mapping[str, "ToolDef"]) -> str:
    """One line per tool, in registry order."""
    lines = ["AVAILABLE TOOLS:"]
    for tool in tools.values():
        lines.append(f"- {tool.name}: Use this tool when you need to {tool.description}")
    return "\n".join(lines)


def build_pipeline(tools: Mapping[str, "ToolDef"], config_text: str) -> PromptPipeline:
    return (
        PromptPipeline()
        .add_layer("persona", PERSONA, PRIORITY_PERSONA)
        .add_layer("tools", render_tool_catalog(tools), PRIORITY_TOOLS)
        .add_layer("guidelines", GUIDELINES, PRIORITY_GUIDELINES)
        .add_layer("config", "Config File:\n" + config_text, PRIORITY_CONFIG)
    )


def build_directive(tools: Mapping[str, "ToolDef"], config_text: str) -> str:
    """Render the directive for a registry and configuration document.

    Args:
        tools: The merged tool registry.
        config_text: Operational configuration, embedded verbatim.

    Returns:
        The directive text. Identical inputs give identical output.
    """
    return build_pipeline(tools, config_text).build()


def load_config_document(path: str) -> str:
    """Read the operational configuration document.

    Raises:
        StartupFatal: the file is missing or unreadable.
    """
    try:
        return Path(path).expanduser().read_text(encoding="utf-8")
    except OSError as e:
        raise StartupFatal(f"Failed to read config file {path}: {e}") from e
