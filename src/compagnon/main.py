"""Command-line entry point for Compagnon."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

import structlog

from compagnon.catalog import (
    CatalogLoadError,
    EquipmentValidationError,
    GameRules,
    GameRulesLoadError,
    ReferenceCatalog,
    load_game_rules,
)
from compagnon.catalog.loader import load_yaml_file
from compagnon.config import Settings, get_settings
from compagnon.database import close_db, get_session, init_db
from compagnon.database.store import load_ref_items, save_personnage, save_ref_items
from compagnon.rules.competences import apply_rules
from compagnon.rules.inventory import (
    aggregate_catalogue,
    apply_rupture_modifier,
    available_modifier_options,
    format_amount,
)
from compagnon.rules.origins import classify_origin
from compagnon.rules.stats import compute_sheet, equipment_ruptures, needs_adresse_bonus_choice
from compagnon.sheet import CharacterLoadError, CharacterRecord, load_character_file

logger = structlog.get_logger(__name__)

HANDLED_ERRORS = (
    CatalogLoadError,
    EquipmentValidationError,
    GameRulesLoadError,
    CharacterLoadError,
)


def configure_logging(settings: Settings) -> None:
    """Configure structlog from the logging settings."""
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    if settings.log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def load_catalog(path: Path | None, settings: Settings) -> ReferenceCatalog:
    """Load the equipment catalog from a file, or the default file when it exists."""
    if path is not None:
        return ReferenceCatalog.from_file(path)
    if settings.equipment_file.exists():
        return ReferenceCatalog.from_file(settings.equipment_file)
    logger.warning("equipment_file_missing", path=str(settings.equipment_file))
    return ReferenceCatalog()


def load_rules(path: Path | None, settings: Settings) -> GameRules | None:
    """Load the rules reference from a file, or the default file when it exists."""
    if path is not None:
        return load_game_rules(path)
    if settings.game_rules_file.exists():
        return load_game_rules(settings.game_rules_file)
    return None


def render_sheet(
    record: CharacterRecord, catalog: ReferenceCatalog, game_rules: GameRules | None
) -> list[str]:
    """
    Render every derived value of a sheet as text lines.

    Competences are shown after the competence rules ran, so the output
    matches what the sheet would display.
    """
    stats = compute_sheet(record, catalog)
    lines = [
        f"{record.name or '(sans nom)'} - {record.origin or '?'} ({classify_origin(record.origin)})",
        "",
    ]

    for name, detail in stats.all_details().items():
        lines.append(f"[{name}] {detail.total}")
        lines.extend(f"    {line}" for line in detail.render())
    lines.append(f"[protection totale] {stats.total_protection}")

    if needs_adresse_bonus_choice(record):
        lines.append("Adresse > 12 : choisir +1 en attaque (AT) ou en parade (PRD)")

    ruptures = equipment_ruptures(record, catalog)
    if ruptures:
        lines.append("")
        lines.append("Ruptures :")
        for ref_id, rupture in ruptures.items():
            item = catalog.get(ref_id)
            lines.append(f"    {item.name if item else ref_id} : {rupture}")

    context = record.competence_context(game_rules)
    reference = game_rules.reference_competences() if game_rules else {}
    competences = apply_rules(record.competences, context, reference)
    if competences:
        lines.append("")
        lines.append("Compétences :")
        for competence in competences:
            marker = " (auto)" if competence.is_system_managed else ""
            lines.append(f"    {competence.name}{marker}")

    if record.catalogue:
        totals = aggregate_catalogue(record.catalogue, catalog)
        lines.append("")
        lines.append(
            f"Catalogue : {format_amount(totals.total_price)} PO, "
            f"{format_amount(totals.total_weight)} g"
        )

    return lines


async def fetch_catalog() -> ReferenceCatalog:
    """Load the reference catalog stored in the local datastore."""
    await init_db()
    try:
        async with get_session() as session:
            return await load_ref_items(session)
    finally:
        await close_db()


async def import_documents(record: CharacterRecord | None, equipment_file: Path | None) -> None:
    """Store a character document and/or reference equipment in the local datastore."""
    await init_db()
    try:
        async with get_session() as session:
            if equipment_file is not None:
                count = await save_ref_items(session, load_yaml_file(equipment_file))
                print(f"{count} équipements importés")
            if record is not None:
                stored = await save_personnage(session, record)
                print(f"Personnage importé : {stored.id}")
    finally:
        await close_db()


def cmd_fiche(args: argparse.Namespace, settings: Settings) -> int:
    record = load_character_file(args.fichier)
    if args.base:
        catalog = asyncio.run(fetch_catalog())
    else:
        catalog = load_catalog(args.equipements, settings)
    game_rules = load_rules(args.regles, settings)
    print("\n".join(render_sheet(record, catalog, game_rules)))
    return 0


def cmd_origine(args: argparse.Namespace, settings: Settings) -> int:
    print(classify_origin(args.texte))
    return 0


def cmd_rupture(args: argparse.Namespace, settings: Settings) -> int:
    print(apply_rupture_modifier(args.valeur, args.modificateur))
    options = available_modifier_options(args.valeur, cap=settings.rupture_cap)
    print("Modificateurs possibles : " + ", ".join(str(o) for o in options))
    return 0


def cmd_importer(args: argparse.Namespace, settings: Settings) -> int:
    if args.fichier is None and args.equipements is None:
        print("Rien à importer", file=sys.stderr)
        return 1
    record = load_character_file(args.fichier) if args.fichier else None
    asyncio.run(import_documents(record, args.equipements))
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(prog="compagnon", description="Compagnon character sheets")
    subparsers = parser.add_subparsers(dest="command", required=True)

    fiche = subparsers.add_parser("fiche", help="Show every derived value of a character")
    fiche.add_argument("fichier", type=Path, help="Character document (YAML or JSON)")
    fiche.add_argument("--equipements", type=Path, help="Equipment reference file")
    fiche.add_argument("--regles", type=Path, help="Game rules reference file")
    fiche.add_argument(
        "--base", action="store_true", help="Read the equipment reference from the datastore"
    )
    fiche.set_defaults(handler=cmd_fiche)

    origine = subparsers.add_parser("origine", help="Classify an origin into its archetype")
    origine.add_argument("texte", help="Origin as written on the sheet")
    origine.set_defaults(handler=cmd_origine)

    rupture = subparsers.add_parser("rupture", help="Apply a rupture modifier")
    rupture.add_argument("valeur", help="Base rupture (e.g. '1à3', 'Non')")
    rupture.add_argument("modificateur", type=int, nargs="?", default=0, help="Modifier")
    rupture.set_defaults(handler=cmd_rupture)

    importer = subparsers.add_parser("importer", help="Store documents in the local datastore")
    importer.add_argument("fichier", type=Path, nargs="?", help="Character document")
    importer.add_argument("--equipements", type=Path, help="Equipment reference file to store")
    importer.set_defaults(handler=cmd_importer)

    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Parse the command line and run the selected command.

    Returns:
        Process exit status
    """
    settings = get_settings()
    configure_logging(settings)

    args = build_parser().parse_args(argv)
    try:
        return args.handler(args, settings)
    except HANDLED_ERRORS as e:
        logger.error("command_failed", command=args.command, error=str(e))
        return 1


def run() -> None:
    """
    Synchronous entry point used by the console script.
    """
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logger.info("interrupted_by_user")
    except Exception as e:
        logger.error("fatal_error", error=str(e), exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    run()
