"""
ALS Surgeon - Ableton Live Set structural editor

Usage:
    als-surgeon strip <file>        Remove element subtrees (default: SideChain)
    als-surgeon plugins <file>      List VST2/VST3/AU plugins used in a set
    als-surgeon extract <file> -r   Dump self-closing elements under a root tag
    als-surgeon decompress <file>   Write the raw XML of a set
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

import click

from . import __version__
from .cli_formatter import CLIFormatter, get_formatter
from .config import SurgeonConfig, load_config
from .errors import SurgeonError
from .pipeline import SurgeryJob, default_output_path, run_job
from .project_io import load_als, write_output
from .tag_extractor import resolve_schemas


def configure_logging(level: str):
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    logging.getLogger('als_surgeon').setLevel(level)


def _fail(fmt: CLIFormatter, error: SurgeonError):
    fmt.error(str(error))
    raise SystemExit(1)


@click.group()
@click.version_option(version=__version__, prog_name="als-surgeon")
@click.option('--no-color', is_flag=True,
              help='Disable colored output (also NO_COLOR=1)')
@click.option('--config', 'config_path', type=click.Path(dir_okay=False), default=None,
              help='Config file (default: ./als_surgeon.yaml)')
@click.option('--verbose', '-v', is_flag=True, help='Show debug logging')
@click.pass_context
def cli(ctx, no_color: bool, config_path: Optional[str], verbose: bool):
    """ALS Surgeon - strip and inspect Ableton Live Sets

    Removes unwanted element subtrees from .als files and extracts plugin
    information, without loading the whole project into memory as a tree.
    """
    config = load_config(config_path)
    configure_logging('DEBUG' if verbose else config.log_level)

    ctx.ensure_object(dict)
    ctx.obj['formatter'] = get_formatter(no_color=no_color)
    ctx.obj['config'] = config


@cli.command('strip')
@click.argument('source', type=click.Path(exists=True, dir_okay=False))
@click.option('--tag', '-t', 'tags', multiple=True,
              help='Element name to remove with its subtree (repeatable)')
@click.option('--output', '-o', type=click.Path(dir_okay=False), default=None,
              help='Output path (default: <name>.stripped.xml next to the source)')
@click.option('--compress/--no-compress', default=None,
              help='Write a gzipped .als instead of plain XML')
@click.pass_context
def strip_cmd(ctx, source: str, tags: Tuple[str, ...], output: Optional[str],
              compress: Optional[bool]):
    """Remove element subtrees from a Live Set.

    Every element named with --tag is removed together with everything
    inside it. The rest of the document is written back re-indented.

    Example:
        als-surgeon strip "My Song.als"
        als-surgeon strip "My Song.als" -t SideChain -t Buffer --compress
    """
    fmt: CLIFormatter = ctx.obj['formatter']
    config: SurgeonConfig = ctx.obj['config']

    delete_tags = list(tags) or config.delete_tags
    if compress is None:
        compress = bool(config.output.get('compress', False))
    source_path = Path(source)
    output_path = Path(output) if output else default_output_path(
        source_path, config.output.get('suffix', '.stripped'), compress)

    job = SurgeryJob(source=source_path, delete_tags=delete_tags,
                     output=output_path, compress=compress)
    try:
        result = run_job(job)
    except SurgeonError as e:
        _fail(fmt, e)

    stats = result.filter_stats
    removed = ", ".join(fmt.tag_text(tag, removed=True) for tag in delete_tags) or "nothing"
    table = fmt.create_table(title=f"Removed: {removed}")
    table.add_column("Metric")
    table.add_column("Count", right=True)
    table.add_row("Subtrees removed", stats.subtrees_removed)
    table.add_row("Self-closing removed", stats.empty_elements_removed)
    table.add_row("Events suppressed", stats.events_suppressed)
    table.add_row("Elements written", stats.elements_emitted)
    table.add_row("Bytes in", f"{stats.bytes_in:,}")
    table.add_row("Bytes out", f"{stats.bytes_out:,}")
    table.render()
    fmt.success(f"Wrote {result.output_path}")


@cli.command('plugins')
@click.argument('source', type=click.Path(exists=True, dir_okay=False))
@click.option('--schema', '-s', 'schema_keys', multiple=True,
              help='Plugin format to list: vst2, vst3, au (repeatable)')
@click.option('--json', 'as_json', is_flag=True, help='Output as JSON')
@click.pass_context
def plugins_cmd(ctx, source: str, schema_keys: Tuple[str, ...], as_json: bool):
    """List the plugins referenced by a Live Set.

    Example:
        als-surgeon plugins "My Song.als"
        als-surgeon plugins "My Song.als" -s vst3 --json
    """
    fmt: CLIFormatter = ctx.obj['formatter']
    config: SurgeonConfig = ctx.obj['config']

    keys = list(schema_keys) or list(config.extract.get('default_schemas', []))
    try:
        schemas = resolve_schemas(keys, config.plugin_schemas())
    except KeyError as e:
        raise click.BadParameter(e.args[0], param_hint="'--schema'")

    try:
        result = run_job(SurgeryJob(source=Path(source), plugin_schemas=schemas))
    except SurgeonError as e:
        _fail(fmt, e)

    if as_json:
        fmt.print_json(result.plugins)
        return

    for schema in schemas:
        names = result.plugins.get(schema.key, [])
        fmt.header(f"{schema.description or schema.key} ({len(names)})")
        if not names:
            fmt.print("  (none)")
        for name in names:
            fmt.print(f"  {fmt.plugin_text(name)}")


@cli.command('extract')
@click.argument('source', type=click.Path(exists=True, dir_okay=False))
@click.option('--root', '-r', required=True,
              help='Element whose self-closing descendants form one group')
@click.option('--element', '-e', default=None, help='Element to read within each group')
@click.option('--key', '-k', default=None, help='Attribute of --element to print')
@click.option('--json', 'as_json', is_flag=True, help='Output as JSON')
@click.pass_context
def extract_cmd(ctx, source: str, root: str, element: Optional[str],
                key: Optional[str], as_json: bool):
    """Dump the self-closing elements inside every ROOT element.

    With --element and --key, print one attribute value per group instead.

    Example:
        als-surgeon extract "My Song.als" -r VstPluginInfo
        als-surgeon extract "My Song.als" -r VstPluginInfo -e PlugName -k Value
    """
    fmt: CLIFormatter = ctx.obj['formatter']

    if (element is None) != (key is None):
        raise click.UsageError("--element and --key must be used together")

    job = SurgeryJob(source=Path(source), extract_root=root,
                     extract_element=element, extract_key=key)
    try:
        result = run_job(job)
    except SurgeonError as e:
        _fail(fmt, e)

    if element:
        if as_json:
            fmt.print_json(result.values)
        else:
            for value in result.values:
                fmt.print_raw(value)
        return

    if as_json:
        fmt.print_json(result.to_dict()['groups'])
        return

    for index, group in enumerate(result.groups, 1):
        fmt.header(f"{root} #{index} ({len(group)} elements)")
        for captured in group:
            attrs = " ".join(f'{k}="{v}"' for k, v in captured.attributes)
            fmt.print_raw(f"  <{captured.name} {attrs}/>" if attrs else f"  <{captured.name}/>")
    if not result.groups:
        fmt.warning(f"No <{root}> elements found")


@cli.command('decompress')
@click.argument('source', type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', type=click.Path(dir_okay=False), default=None,
              help='Output path (default: <name>.xml next to the source)')
@click.pass_context
def decompress_cmd(ctx, source: str, output: Optional[str]):
    """Write the uncompressed XML of a Live Set.

    Example:
        als-surgeon decompress "My Song.als" -o song.xml
    """
    fmt: CLIFormatter = ctx.obj['formatter']

    source_path = Path(source)
    if output:
        output_path = Path(output)
    elif source_path.suffix.lower() == '.xml':
        output_path = source_path.with_name(f"{source_path.stem}.decompressed.xml")
    else:
        output_path = source_path.with_suffix('.xml')
    try:
        write_output(load_als(source_path), output_path)
    except SurgeonError as e:
        _fail(fmt, e)

    fmt.success(f"Wrote {output_path}")


if __name__ == '__main__':
    cli()
