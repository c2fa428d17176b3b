"""
Command line entry point for postlang.

    postlang [FILE]

Reads FILE (or standard input) one top-level entity at a time, printing
the prompt before each. Evaluation results and runtime library output go
to stdout; the prompt, diagnostics, debug dumps and the closing banner go
to stderr.

Author: xwest
"""

import click

from .lexer.lexer import Lexer
from .parser.parser import Parser
from .backend.errors import BackendInitError
from .backend.llvm_backend import LLVMBackend
from .session.config import SessionConfig
from .session.session import CompilationSession
from .session.driver import Driver, ResultKind, TopLevelResult


def report(result: TopLevelResult, config: SessionConfig):
    """Print one driver result the way the interactive loop shows it."""
    if config.dump_ast and result.ast:
        click.echo(result.ast, err=True)
    
    if result.kind == ResultKind.ERROR:
        click.echo(str(result.error), err=True, nl=False)
        return
    
    if config.dump_ir and result.ir:
        headings = {
            ResultKind.DEFINITION: "Read function definition:",
            ResultKind.EXTERN: "Read extern:",
            ResultKind.EXPRESSION: "Read top-level expression:",
        }
        click.echo(headings[result.kind], err=True)
        click.echo(result.ir, err=True)
    
    if result.kind == ResultKind.EXPRESSION:
        click.echo(f"Evaluated to {result.value}")


@click.command()
@click.argument("source", required=False, default="-", type=click.File("r"))
@click.pass_context
def main(ctx: click.Context, source):
    """Run a postlang program, interactively when no FILE is given."""
    filename = "<stdin>" if source.name == "<stdin>" else source.name
    
    try:
        config = SessionConfig.from_env(filename=filename)
    except ValueError as e:
        raise click.UsageError(str(e))
    
    try:
        backend = LLVMBackend(config.optimization_level)
    except BackendInitError as e:
        click.echo(str(e), err=True, nl=False)
        ctx.exit(1)
    
    session = CompilationSession(backend, config)
    driver = Driver(
        Parser(Lexer(source, config.filename)),
        session,
        on_prompt=lambda: click.echo(config.prompt, err=True, nl=False)
    )
    
    try:
        for result in driver.run():
            report(result, config)
    except BackendInitError as e:
        click.echo(str(e), err=True, nl=False)
        ctx.exit(1)
    
    click.echo(config.banner, err=True)

