# ebpfgen/cli.py - Command-line interface
"""
Command-line interface for the eBPF syscall tracing program generator.
"""

import click
import sys
import logging

from ebpfgen.catalog.syscalls import builtin_catalog, load_catalog
from ebpfgen.errors import GeneratorError
from ebpfgen.utils.config import Config, StringReadPolicy
from ebpfgen.utils.logger import setup_logging


logger = logging.getLogger(__name__)


def _load_catalog(path):
    if path:
        return load_catalog(path)
    return builtin_catalog()


@click.group()
@click.option('--log-level', default='INFO', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']))
@click.option('--log-file', type=click.Path(), help='Log file path')
@click.pass_context
def cli(ctx, log_level, log_file):
    """
    eBPF syscall tracing program generator

    Builds the C source of an eBPF program tracing syscalls out of
    per-syscall template fragments.
    """
    ctx.ensure_object(dict)

    setup_logging(level=log_level, log_file=log_file)

    ctx.obj['log_level'] = log_level
    ctx.obj['log_file'] = log_file


@cli.command()
@click.option('--config', type=click.Path(), help='Configuration file')
@click.option('--expr', help='Syscall set: all, kp-all, kp-file, kp-desc, kp-fileio')
@click.option('--pid', type=int, help='Process ID to trace (default: everything but ourselves)')
@click.option('--full-feature/--no-full-feature', default=None, help='Follow forks and exits')
@click.option('--string-read', type=click.Choice([p.value for p in StringReadPolicy]), help='String read policy')
@click.option('--string-packets', type=int, help='Number of packets per string argument')
@click.option('--catalog', type=click.Path(exists=True, dir_okay=False), help='YAML syscall catalog')
@click.option('--template-dir', type=click.Path(exists=True, file_okay=False), help='Template directory')
@click.option('--output', '-o', type=click.Path(), help='Output file (default: stdout)')
@click.option('--debug', is_flag=True, help='Wrap the code in debug marks')
def generate(config, expr, pid, full_feature, string_read, string_packets,
             catalog, template_dir, output, debug):
    """
    Generate the eBPF tracing program.

    Example:
        ebpfgen generate --expr kp-file -o trace.c
        ebpfgen generate --pid 1234 --full-feature --string-read full --string-packets 4
    """
    from ebpfgen.exporters.source import SourceExporter
    from ebpfgen.exporters.stdout import StdoutExporter
    from ebpfgen.generator.attach import generate as generate_program
    from ebpfgen.templates.store import TemplateStore
    from ebpfgen.utils.helpers import get_process_name, validate_pid

    try:
        cfg = Config(config)
    except GeneratorError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    # Override config with CLI options
    overrides = {
        'generator.expression': expr,
        'generator.pid': pid,
        'generator.full_feature': full_feature,
        'generator.string_read': string_read,
        'generator.string_packets': string_packets,
        'catalog.file': catalog,
        'templates.dir': template_dir,
        'output.file': output,
    }
    for key, value in overrides.items():
        if value is not None:
            cfg.set(key, value)
    if debug:
        cfg.set('output.debug_marks', True)

    try:
        mode = cfg.to_capture_mode()

        if mode.target_pid is not None:
            if validate_pid(mode.target_pid):
                logger.info(f"Generating for PID {mode.target_pid} ({get_process_name(mode.target_pid)})")
            else:
                logger.warning(f"PID {mode.target_pid} is not running")

        syscalls = _load_catalog(cfg.get('catalog.file'))
        store = TemplateStore(cfg.get('templates.dir'))
        text = generate_program(syscalls, mode, store)

        output_file = cfg.get('output.file')
        if output_file:
            SourceExporter().export(text, output_file)
        else:
            StdoutExporter().write_program(text, debug_marks=bool(cfg.get('output.debug_marks')))

    except GeneratorError as e:
        logger.error(f"Generation failed: {e}")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.option('--expr', default='all', help='Syscall set to list')
@click.option('--catalog', type=click.Path(exists=True, dir_okay=False), help='YAML syscall catalog')
def syscalls(expr, catalog):
    """
    List the syscalls a trace expression selects.

    Example:
        ebpfgen syscalls --expr kp-fileio
    """
    from ebpfgen.exporters.stdout import StdoutExporter
    from ebpfgen.generator.assembler import resolve_expression

    try:
        selection = resolve_expression(expr)
        selected = _load_catalog(catalog).select(selection.mask)
    except GeneratorError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    StdoutExporter(use_colors=False).print_selection(selected, expr)


@cli.command()
@click.option('--template-dir', type=click.Path(exists=True, file_okay=False), help='Template directory')
def templates(template_dir):
    """
    Check that every template file is present.
    """
    from ebpfgen.templates.store import TemplateStore

    store = TemplateStore(template_dir)
    missing = set(store.missing())

    click.echo(f"Templates in {store.template_dir}:")
    for name in store.index.all_files():
        status = "✗" if name in missing else "✓"
        click.echo(f"  {status} {name}")

    if missing:
        click.echo(f"\n✗ {len(missing)} template(s) missing")
        sys.exit(1)

    click.echo("\n✓ All templates present")


if __name__ == '__main__':
    cli(obj={})
