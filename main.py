import argparse
import sys

from cardmatch.config import settings
from cardmatch.domain.errors import CatalogConfigError
from cardmatch.repository.catalog_store import CardCatalogStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="CardMatch unified entrypoint")
    parser.add_argument(
        "mode",
        nargs="?",
        choices=["api", "bot", "check-catalog"],
        default="api",
        help="Run mode: api (default), bot, check-catalog",
    )
    return parser


def check_catalog() -> int:
    try:
        snapshot = CardCatalogStore(settings.card_catalog_file).load_snapshot()
    except CatalogConfigError as exc:
        print(f"Catalog invalid: {exc}", file=sys.stderr)
        return 1

    print(f"Catalog {settings.card_catalog_file} OK: {len(snapshot)} cards, version {snapshot.version}")
    return 0


def main() -> None:
    args = build_parser().parse_args()

    if args.mode == "api":
        from cardmatch.api.app import run as run_api

        run_api()
        return

    if args.mode == "bot":
        from cardmatch.integrations.telegram_bot import main as run_bot

        run_bot()
        return

    sys.exit(check_catalog())


if __name__ == "__main__":
    main()
