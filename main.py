"""Simple entrypoint to generate looks from a local catalog export."""

import argparse
import json

from lookbook_app.app import LookbookApp
from lookbook_app.config import LookbookConfig
from models.profile import StyleProfile
from tools.catalog_provider import JsonFileCatalogProvider


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate outfit looks from a catalog JSON file.")
    parser.add_argument("catalog", nargs="+", help="Catalog JSON file(s)")
    parser.add_argument("--budget", type=float, required=True)
    parser.add_argument("--gender", choices=["female", "male"])
    parser.add_argument("--age", type=int)
    parser.add_argument("--style", default="casual")
    parser.add_argument("--temperature", choices=["cold", "mild", "hot"], default="mild")
    parser.add_argument("--rain", action="store_true")
    parser.add_argument("--seed", type=int)
    args = parser.parse_args()

    config = LookbookConfig.from_env()
    app = LookbookApp(config=config, catalog_provider=JsonFileCatalogProvider(args.catalog))
    profile = StyleProfile(
        budget=args.budget,
        gender=args.gender,
        age=args.age,
        style=args.style,
        temperature=args.temperature,
        rain=args.rain,
    )
    look = app.generate_look(profile, seed=args.seed)
    print(json.dumps(look.to_dict(), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
