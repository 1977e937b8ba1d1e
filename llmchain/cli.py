#!/usr/bin/env python
"""CLI entry point for llmchain pipelines."""

import asyncio
import logging
import os
import sys
from typing import Optional

import click

from .config import OLLAMA_BASE_URL, setup_logging
from .decoders import JSONDecoder, Record, RegexDecoder
from .errors import LLMChainError
from .loader import build_pipeline, load_definition
from .memory import BaseMemory, RamMemory
from .pipeline import Pipeline, Step
from .prompt import PromptTemplate, format_value
from .providers import InvocationMode, MockBackend

logger = logging.getLogger(__name__)

DEMO_RESPONSES = {
    "step1": "purple elephant lullaby tangerine",
    "step2": '{"First": "orbit", "Second": "marmalade"}',
    "step3": "glad tidings to everyone reading",
}


def build_demo_pipeline() -> Pipeline:
    """Three chained steps answered by mock backends."""
    words = MockBackend(DEMO_RESPONSES["step1"])
    json_words = MockBackend(DEMO_RESPONSES["step2"])
    closing = MockBackend(DEMO_RESPONSES["step3"])

    step1 = Step("step1", words, InvocationMode.COMPLETION, "Hello how are you?")
    step2 = Step(
        "step2",
        json_words,
        InvocationMode.COMPLETION,
        PromptTemplate(
            "It seems you are a random word generator. Your message '{{ step1.output }}' "
            "is nonsense. Anyway I'm fine {{ value }}!",
            {"value": "thanks"},
        ),
        decoder=JSONDecoder(),
        target=Record.of("First", "Second"),
    )
    step3 = Step(
        "step3",
        closing,
        InvocationMode.COMPLETION,
        PromptTemplate(
            "Oh! It seems you are a random JSON word generator. You generated two strings, "
            "first:'{{ First }}' and second:'{{ Second }}'. {{ value }}\n"
            "However your first message was: '{{ step1.output }}'",
            {"value": "Bye!"},
        ),
        decoder=RegexDecoder(r"(\w+)\s(\w+)\s(.*)"),
    )
    return Pipeline([step1, step2, step3], memory=RamMemory())


def _echo_memory(memory: BaseMemory) -> None:
    """Print the memory dump, or why it could not be read."""
    click.echo("---Memory---")
    try:
        click.echo(memory.dump())
    except Exception as e:
        logger.error(f"Memory dump failed: {e}")
        click.echo(f"Memory dump unavailable: {e}", err=True)


@click.group()
@click.option("--log-level", type=str, default=None, help="Logging level (default: LOG_LEVEL env)")
def cli(log_level: Optional[str]):
    """llmchain - run ordered pipelines of model calls."""
    setup_logging(log_level)


@cli.command()
@click.argument("pipeline_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--input", "input_text", type=str, default="", help="External input for the first step")
@click.option("--dump/--no-dump", default=True, help="Print the memory dump after the run")
def run(pipeline_file: str, input_text: str = "", dump: bool = True):
    """Run a pipeline definition file."""

    async def _run():
        definition = load_definition(pipeline_file)
        pipeline = build_pipeline(definition)
        click.echo(f"Running {pipeline!r}...")
        try:
            result = await pipeline.run(input_text or None)
        finally:
            if dump:
                _echo_memory(pipeline.memory)
        click.echo(f"Final output: {format_value(result)}")

    try:
        asyncio.run(_run())
    except LLMChainError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument("pipeline_file", type=click.Path(exists=True, dir_okay=False))
def validate(pipeline_file: str):
    """Parse a pipeline definition and build it without running."""
    try:
        pipeline = build_pipeline(load_definition(pipeline_file))
    except LLMChainError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo(f"✓ {pipeline_file}: {len(pipeline)} steps {pipeline.step_names}")


@cli.command()
def demo():
    """Run the three-step example with mock backends."""

    async def _run():
        pipeline = build_demo_pipeline()
        result = await pipeline.run()
        click.echo(f"Final output: {', '.join(result)}")
        _echo_memory(pipeline.memory)

    asyncio.run(_run())


@cli.command()
def status():
    """Show which backends and stores are configured."""
    if os.getenv("OPENAI_API_KEY"):
        click.echo("✓ OpenAI API key configured")
    else:
        click.echo("✗ OpenAI API key missing")

    click.echo(f"Ollama URL: {OLLAMA_BASE_URL}")
    click.echo(f"Redis: {os.getenv('REDIS_HOST', 'localhost')}:{os.getenv('REDIS_PORT', '6379')}")


if __name__ == "__main__":
    cli()
