"""
src/app.py

Gradio front-end: type a prompt, run the agent, inspect the answer, the
transcript and the function call summary, download the ledger.
"""


import json
import logging
import tempfile
from pathlib import Path
from typing import Optional, Tuple

import gradio as gr

from config import AgentSettings, GatewaySettings, ToolChoice, log_level
from orchestrator.exports import export_csv, export_json, export_ledger_pdf, render_summary
from orchestrator.gateway import GenerationParams, OpenAIGateway
from orchestrator.loop import Orchestrator
from orchestrator.models import RunResult
from orchestrator.prompts import DEFAULT_PROMPT, EXAMPLE_PROMPTS
from tools.demo import default_registry


APP_TITLE = "Function-Calling Agent (Local Demo)"
APP_DESC = (
    "Ask for something the tools can do, e.g. "
    "'Make the sum of 40 and 2, then say hello to Bob'. "
    "The agent keeps calling tools until the model gives a final answer."
)

logger = logging.getLogger(__name__)


def configure_logging(level: Optional[str] = None) -> None:

    logging.basicConfig(
        level=level or log_level(),
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )


def build_orchestrator(
        gateway_settings: GatewaySettings,
        agent_settings: AgentSettings,
) -> Orchestrator:
    """Wire settings, gateway and the demo registry into one agent."""

    return Orchestrator(
        OpenAIGateway(gateway_settings),
        default_registry(),
        params=GenerationParams.from_settings(gateway_settings, agent_settings),
        settings=agent_settings,
    )


def export_run(result: RunResult, out_dir: Path) -> Tuple[str, str, str]:

    out_dir.mkdir(parents=True, exist_ok=True)

    return (
        export_json(result, str(out_dir / "run.json")),
        export_csv(result.ledger, str(out_dir / "ledger.csv")),
        export_ledger_pdf(result, str(out_dir / "report.pdf")),
    )


def handle_prompt(prompt: str, temperature: float, max_iterations: int, tool_choice: str, parallel: bool):
    """Run one conversation and shape the result for the UI widgets."""

    gateway_settings = GatewaySettings.from_env()
    agent_settings = AgentSettings.from_env().model_copy(update={
        "temperature": float(temperature),
        "max_iterations": int(max_iterations),
        "tool_choice": ToolChoice(tool_choice),
        "parallel_tool_calls": bool(parallel),
    })

    result = build_orchestrator(gateway_settings, agent_settings).run(prompt)

    answer = result.answer if result.answer is not None else f"(stopped: {result.stop_reason.value})"
    transcript_json = json.dumps(result.transcript.model_dump(mode="json")["turns"], indent=2, ensure_ascii=False)
    files = export_run(result, Path(tempfile.mkdtemp(prefix="agent-run-")))

    return answer, render_summary(result), transcript_json, list(files)


def app():
    with gr.Blocks(title=APP_TITLE) as demo:
        gr.Markdown(f"# {APP_TITLE}")
        gr.Markdown(APP_DESC)

        with gr.Row():
            preset_dd = gr.Dropdown(
                label="Preset",
                choices=list(EXAMPLE_PROMPTS),
                value=None,
                info="Fill the prompt with an example."
            )
            choice_dd = gr.Dropdown(
                label="Tool choice",
                choices=[c.value for c in ToolChoice],
                value=ToolChoice.AUTO.value,
            )
            temperature = gr.Slider(label="Temperature", minimum=0.0, maximum=1.5, value=0.0, step=0.1)
            max_iterations = gr.Slider(label="Max iterations", minimum=1, maximum=25, value=10, step=1)
            parallel = gr.Checkbox(label="Parallel tool calls", value=False)

        prompt = gr.Textbox(label="Prompt", value=DEFAULT_PROMPT, lines=3)
        run = gr.Button("Run", variant="primary")

        answer = gr.Textbox(label="Answer", lines=3)
        with gr.Tab("Function calls"):
            summary = gr.Code(label="Summary")
        with gr.Tab("Transcript"):
            transcript = gr.Code(label="Transcript", language="json")
        with gr.Tab("Downloads"):
            downloads = gr.File(label="Run exports", file_count="multiple")

        preset_dd.change(
            fn=lambda name: EXAMPLE_PROMPTS.get(name, DEFAULT_PROMPT),
            inputs=[preset_dd],
            outputs=[prompt],
        )
        run.click(
            fn=handle_prompt,
            inputs=[prompt, temperature, max_iterations, choice_dd, parallel],
            outputs=[answer, summary, transcript, downloads],
        )

    return demo


if __name__ == "__main__":

    configure_logging()
    app().launch()

# EOF
