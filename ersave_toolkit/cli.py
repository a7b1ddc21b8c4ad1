"""Elden Ring Save Toolkit CLI."""

import logging
import re
import sys
from pathlib import Path
from typing import Optional

import click

from . import __version__
from .save.layout import DEFAULT_LAYOUT, SaveLayout

SAVE_PATH = click.Path(exists=True, dir_okay=False, path_type=Path)
OUTPUT_PATH = click.Path(dir_okay=False, path_type=Path)


def format_play_time(seconds: int) -> str:
    """Format seconds as "1h 2m 3s", dropping leading zero units."""
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60

    if hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    elif minutes > 0:
        return f"{minutes}m {secs}s"
    else:
        return f"{secs}s"


def slot_file_name(character_name: str, suffix: str) -> str:
    """File name for an extracted slot; path separators become underscores."""
    stem = re.sub(r"[\\/]", "_", character_name).strip() or "slot"
    return f"{stem}{suffix}"


def configure_logging(verbosity: int) -> None:
    if verbosity <= 0:
        return
    level = logging.INFO if verbosity == 1 else logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def fail(error: Exception) -> None:
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", count=True, help="Log progress (-vv for debug output)")
@click.pass_context
def main(ctx: click.Context, verbose: int):
    """Elden Ring Save Toolkit - inspect and edit .sl2 save files.

    \b
    Slots can be copied between saves, extracted to portable .er files
    and imported back, and character attributes can be edited. Every
    write keeps the file's MD5 checksums consistent.
    """
    configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj.setdefault("layout", DEFAULT_LAYOUT)


@main.command()
@click.argument("save_file", type=SAVE_PATH)
@click.pass_obj
def info(obj: dict, save_file: Path):
    """Show the slots of a save file."""
    from .save import SaveFile

    try:
        save = SaveFile.from_file(save_file, obj["layout"])
        header = save.archive.header

        click.echo(f"File:     {save_file}")
        click.echo(f"Entries:  {len(save.archive)}")
        click.echo(f"Format:   0x{header.format:02X} (raw 0x{header.raw_format:02X})")
        click.echo(f"Steam ID: {save.steam_id}")
        click.echo()

        for slot in save.slots:
            marker = "*" if slot.active else " "
            click.echo(
                f"{marker} [{slot.index}] {slot.character_name:<16} "
                f"level {slot.character_level:<4} {format_play_time(slot.seconds_played)}"
            )

    except Exception as e:
        fail(e)


@main.command()
@click.argument("source", type=SAVE_PATH)
@click.argument("source_slot", type=click.IntRange(0, 9))
@click.argument("target", type=SAVE_PATH)
@click.argument("target_slot", type=click.IntRange(0, 9))
@click.option("-o", "--output", type=OUTPUT_PATH, help="Output save file (default: overwrite TARGET)")
@click.pass_obj
def copy(obj: dict, source: Path, source_slot: int, target: Path, target_slot: int, output: Optional[Path]):
    """Copy a character slot from SOURCE into TARGET."""
    from .save import SaveFile, copy_slot, write_save_file_atomically

    layout: SaveLayout = obj["layout"]

    try:
        slot = SaveFile.from_file(source, layout).require_slot(source_slot)
        updated = copy_slot(slot, SaveFile.from_file(target, layout), target_slot)

        output = output or target
        write_save_file_atomically(output, updated)
        click.echo(f"Copied {slot.character_name} (level {slot.character_level}) to slot {target_slot}")
        click.echo(f"Created: {output}")

    except Exception as e:
        fail(e)


@main.command()
@click.argument("save_file", type=SAVE_PATH)
@click.argument("slot_index", type=click.IntRange(0, 9))
@click.option("-o", "--output", type=OUTPUT_PATH, help="Output .er file (default: <character name>.er)")
@click.option("--level", "compression_level", type=click.IntRange(1, 22), default=8, help="zstd level")
@click.pass_obj
def extract(obj: dict, save_file: Path, slot_index: int, output: Optional[Path], compression_level: int):
    """Extract a slot to a portable .er file."""
    from .save import SaveFile, write_extracted_slot
    from .save.transfer import EXTRACTED_SLOT_SUFFIX

    try:
        slot = SaveFile.from_file(save_file, obj["layout"]).require_slot(slot_index)

        if output is None:
            output = save_file.parent / slot_file_name(slot.character_name, EXTRACTED_SLOT_SUFFIX)

        result = write_extracted_slot(output, slot, compression_level)
        click.echo(f"Original:   {result.original_size} bytes")
        click.echo(f"Compressed: {result.compressed_size} bytes")
        click.echo(f"Ratio:      {result.compression_ratio:.2f}")
        click.echo(f"Created: {output}")

    except Exception as e:
        fail(e)


@main.command("import")
@click.argument("slot_file", type=SAVE_PATH)
@click.argument("target", type=SAVE_PATH)
@click.argument("target_slot", type=click.IntRange(0, 9))
@click.option("-o", "--output", type=OUTPUT_PATH, help="Output save file (default: overwrite TARGET)")
@click.pass_obj
def import_(obj: dict, slot_file: Path, target: Path, target_slot: int, output: Optional[Path]):
    """Import a portable .er file into a slot of TARGET."""
    from .save import SaveFile, copy_slot, load_extracted_slot, write_save_file_atomically

    layout: SaveLayout = obj["layout"]

    try:
        slot = load_extracted_slot(slot_file, layout)
        updated = copy_slot(slot, SaveFile.from_file(target, layout), target_slot)

        output = output or target
        write_save_file_atomically(output, updated)
        click.echo(f"Imported {slot.character_name} (level {slot.character_level}) to slot {target_slot}")
        click.echo(f"Created: {output}")

    except Exception as e:
        fail(e)


@main.command()
@click.argument("save_file", type=SAVE_PATH)
@click.argument("slot_index", type=click.IntRange(0, 9))
@click.pass_obj
def stats(obj: dict, save_file: Path, slot_index: int):
    """Show the attributes of a slot."""
    from .save import get_stats

    try:
        character = get_stats(save_file.read_bytes(), slot_index, obj["layout"])
        if character is None:
            click.echo(f"No stats found for slot {slot_index}")
            return

        for name, value in character.attributes.as_dict().items():
            click.echo(f"{name.capitalize():<13} {value}")
        click.echo()
        click.echo(f"Level:        {character.level}")
        click.echo(f"HP:           {'/'.join(map(str, character.hp))}")
        click.echo(f"FP:           {'/'.join(map(str, character.fp))}")
        click.echo(f"Stamina:      {'/'.join(map(str, character.stamina))}")

    except Exception as e:
        fail(e)


@main.command("set-stats")
@click.argument("save_file", type=SAVE_PATH)
@click.argument("slot_index", type=click.IntRange(0, 9))
@click.option("--vigor", type=click.IntRange(1, 99), help="Vigor")
@click.option("--mind", type=click.IntRange(1, 99), help="Mind")
@click.option("--endurance", type=click.IntRange(1, 99), help="Endurance")
@click.option("--strength", type=click.IntRange(1, 99), help="Strength")
@click.option("--dexterity", type=click.IntRange(1, 99), help="Dexterity")
@click.option("--intelligence", type=click.IntRange(1, 99), help="Intelligence")
@click.option("--faith", type=click.IntRange(1, 99), help="Faith")
@click.option("--arcane", type=click.IntRange(1, 99), help="Arcane")
@click.option("--god-mode", is_flag=True, help="Set HP, FP and stamina to 60000")
@click.option(
    "--custom-attributes",
    is_flag=True,
    help="Recompute HP, FP and stamina from vigor, mind and endurance",
)
@click.option("-o", "--output", type=OUTPUT_PATH, help="Output save file (default: overwrite SAVE_FILE)")
@click.pass_obj
def set_stats_command(
    obj: dict,
    save_file: Path,
    slot_index: int,
    god_mode: bool,
    custom_attributes: bool,
    output: Optional[Path],
    **values: Optional[int],
):
    """Change the attributes of a slot.

    Attributes that are not given keep their current value. The level
    follows from the new attributes.
    """
    from .save import Attributes, get_stats, set_stats, write_save_file_atomically

    layout: SaveLayout = obj["layout"]

    try:
        data = save_file.read_bytes()
        character = get_stats(data, slot_index, layout)
        if character is None:
            fail(ValueError(f"No stats found for slot {slot_index}"))

        current = character.attributes.as_dict()
        current.update({name: value for name, value in values.items() if value is not None})
        attributes = Attributes.from_values(current)

        updated = set_stats(
            data,
            slot_index,
            attributes,
            god_mode=god_mode,
            custom_attributes=custom_attributes,
            layout=layout,
        )

        output = output or save_file
        write_save_file_atomically(output, updated)
        click.echo(f"Level: {character.level} -> {attributes.level}")
        click.echo(f"Created: {output}")

    except Exception as e:
        fail(e)


@main.command()
@click.argument("save_file", type=SAVE_PATH)
@click.pass_obj
def verify(obj: dict, save_file: Path):
    """Check every checksum of a save file."""
    from .save import verify_checksums

    try:
        results = verify_checksums(save_file.read_bytes(), obj["layout"])

        for status in results:
            click.echo(f"{status.region:<14} {'ok' if status.valid else 'MISMATCH'}")

        if not all(status.valid for status in results):
            sys.exit(1)

    except Exception as e:
        fail(e)


@main.command("fix-checksums")
@click.argument("save_file", type=SAVE_PATH)
@click.option("-o", "--output", type=OUTPUT_PATH, help="Output save file (default: overwrite SAVE_FILE)")
@click.pass_obj
def fix_checksums(obj: dict, save_file: Path, output: Optional[Path]):
    """Recalculate every checksum of a save file."""
    from .save import recalculate_checksums, write_save_file_atomically

    try:
        updated = recalculate_checksums(bytearray(save_file.read_bytes()), obj["layout"])

        output = output or save_file
        write_save_file_atomically(output, updated)
        click.echo(f"Created: {output}")

    except Exception as e:
        fail(e)


if __name__ == "__main__":
    main()
