#!/usr/bin/env python3
"""Ad hoc query runner for the Pantry AI pipeline.

Run any intent directly against Gemini without a web server.

Usage:
    python query.py suggest "chocolate"
    python query.py defaults "greek yogurt"
    python query.py defaults --offline "greek yogurt"   # Keyword fallback, no model call
    python query.py shop "2 lbs chicken breast"
    python query.py detect --image images/fridge.jpg
    python query.py recipe "chicken, rice, broccoli"
    python query.py recipe --servings 4 --variants 3 --sophisticated "salmon, lemon"
    python query.py recipe --inventory pantry.json --use-inventory
    python query.py --debug recipe "eggs, spinach"       # Show full JSON response

Features:
- One subcommand per intent
- Recipes rendered as formatted markdown, other records as JSON
- Debug mode to display the full JSON record of any result
- Inventory snapshot loaded from a JSON file (list of {name, quantity, daysUntilExpiry})
"""

import asyncio
import json
import sys
from pathlib import Path

from rich.console import Console
from rich.markdown import Markdown

from pantry_ai.llm.gemini import GeminiClient
from pantry_ai.models.models import Complexity, GenerationRequest, Intent, Recipe, VariantBatch
from pantry_ai.services.pantry import detect_items_from_image, get_quick_defaults, suggest_pantry_item
from pantry_ai.services.recipes import generate_recipes
from pantry_ai.services.shopping import parse_shopping_list_item
from pantry_ai.utils.errors import PipelineError
from pantry_ai.utils.logger import logger

console = Console()

COMMANDS = ("suggest", "defaults", "detect", "recipe", "shop")

MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".heic": "image/heic",
    ".heif": "image/heif",
}

USAGE = (
    "Usage: python query.py [--debug] <suggest|defaults|detect|recipe|shop> [options] \"<text>\"\n"
    "\n"
    "Options:\n"
    "  --debug              Print the full JSON record\n"
    "  --offline            defaults/shop only: skip the model and use fallback rules\n"
    "  --image PATH         detect: photo to analyze\n"
    "  --servings N         recipe: number of servings (default 2)\n"
    "  --variants N         recipe: number of distinct recipes to generate\n"
    "  --sophisticated      recipe: advanced techniques instead of quick & easy\n"
    "  --dessert            recipe: include a dessert component\n"
    "  --diet TEXT          recipe: dietary restrictions\n"
    "  --inventory PATH     recipe: JSON file with the pantry inventory\n"
    "  --use-inventory      recipe: cook from the inventory instead of listed ingredients\n"
)


def recipe_to_markdown(recipe: Recipe) -> str:
    """Render a recipe as markdown for the console."""
    lines = [f"# {recipe.title}", "", f"_{recipe.description}_", ""]
    lines.append(
        f"**Prep:** {recipe.prep_time} | **Cook:** {recipe.cook_time} | "
        f"**Serves:** {recipe.servings} | **Difficulty:** {recipe.difficulty.value}"
    )
    if recipe.variant_index:
        lines.append(f"\n_Variant {recipe.variant_index}_")

    lines += ["", "## Ingredients"] + [f"- {item}" for item in recipe.ingredients]
    lines += ["", "## Instructions"] + [f"{i}. {step}" for i, step in enumerate(recipe.instructions, 1)]
    if recipe.tips:
        lines += ["", "## Tips"] + [f"- {tip}" for tip in recipe.tips]
    if recipe.have_ingredients:
        lines += ["", "## From your pantry"] + [f"- {item}" for item in recipe.have_ingredients]
    if recipe.missing_ingredients:
        lines += ["", "## Shopping needed"] + [f"- {item}" for item in recipe.missing_ingredients]
    return "\n".join(lines)


def load_inventory(path: str) -> list:
    inventory_file = Path(path)
    if not inventory_file.exists():
        console.print(f"[red]✗ Error: Inventory file not found: {path}[/red]")
        sys.exit(1)
    with open(inventory_file, encoding="utf-8") as f:
        return json.load(f)


async def execute(command: str, text: str, options: dict):
    """Run one intent and return its result record(s)."""
    offline = options.get("offline", False)
    if command in ("defaults", "shop") and offline:
        invoker = None
    else:
        invoker = GeminiClient()

    if command == "suggest":
        return await suggest_pantry_item(text, invoker)
    if command == "defaults":
        return await get_quick_defaults(text, invoker)
    if command == "shop":
        return await parse_shopping_list_item(text, invoker)

    if command == "detect":
        image_path = options.get("image")
        if not image_path:
            console.print("[red]✗ Error: detect requires --image PATH[/red]")
            sys.exit(1)
        image_file = Path(image_path)
        if not image_file.exists():
            console.print(f"[red]✗ Error: Image file not found: {image_path}[/red]")
            sys.exit(1)
        logger.info(f"Loading image: {image_file.name}...")
        image_bytes = image_file.read_bytes()
        mime_type = MIME_TYPES.get(image_file.suffix.lower())
        return await detect_items_from_image(image_bytes, invoker, mime_type=mime_type)

    request = GenerationRequest(
        intent=Intent.RECIPE,
        ingredients=text,
        serving_size=options.get("servings", 2),
        dietary_restrictions=options.get("diet"),
        complexity=Complexity.SOPHISTICATED if options.get("sophisticated") else Complexity.QUICK,
        inventory=load_inventory(options["inventory"]) if options.get("inventory") else [],
        use_all_inventory=options.get("use_inventory", False),
        include_dessert=options.get("dessert", False),
        variant_count=options.get("variants", 1),
    )
    return await generate_recipes(request, invoker)


def print_result(result, debug: bool = False) -> None:
    """Pretty-print a pipeline result."""
    if isinstance(result, list):
        data = [item.model_dump(mode="json", by_alias=True) for item in result]
    else:
        data = result.model_dump(mode="json", by_alias=True)

    if debug:
        console.print("[bold cyan]Debug Mode: Full Response[/bold cyan]")
        console.print("[dim]" + "=" * 60 + "[/dim]")
        console.print_json(data=data)
        console.print("[dim]" + "=" * 60 + "[/dim]")
        console.print()

    if isinstance(result, Recipe):
        console.print(Markdown(recipe_to_markdown(result)))
    elif isinstance(result, VariantBatch):
        console.print(f"[bold]{len(result.results)}/{result.requested_count} recipes[/bold] (family {result.family_id})")
        for recipe in result.results:
            console.print()
            console.print(Markdown(recipe_to_markdown(recipe)))
    elif not debug:
        console.print_json(data=data)


def run_query(command: str, text: str, options: dict) -> None:
    """Execute a single ad hoc query and print the result.

    Args:
        command: One of COMMANDS.
        text: Free-text input (item name, shopping line or ingredient list).
        options: Parsed command line flags.
    """
    try:
        logger.info(f"Running {command}: {text}")
        result = asyncio.run(execute(command, text, options))
        console.print()
        print_result(result, debug=options.get("debug", False))
    except KeyboardInterrupt:
        logger.info("\nQuery interrupted by user.")
        sys.exit(0)
    except PipelineError as e:
        console.print(f"[red]✗ {e.message}[/red]")
        if e.details:
            console.print_json(data=e.details)
        sys.exit(1)
    except Exception as e:
        logger.error(f"Query execution failed: {e}", exc_info=True)
        sys.exit(1)


def parse_args(argv: list) -> tuple:
    """Split argv into (command, text, options). Exits with usage on errors."""
    options = {}
    args = []
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg in ("--debug", "--offline", "--sophisticated", "--dessert"):
            options[arg[2:]] = True
        elif arg == "--use-inventory":
            options["use_inventory"] = True
        elif arg in ("--image", "--servings", "--variants", "--diet", "--inventory"):
            i += 1
            if i >= len(argv):
                print(f"Error: {arg} flag requires a value")
                sys.exit(1)
            value = argv[i]
            if arg in ("--servings", "--variants"):
                if not value.isdigit():
                    print(f"Error: {arg} must be a positive integer")
                    sys.exit(1)
                value = int(value)
            options[arg[2:]] = value
        elif arg.startswith("--"):
            print(f"Unknown flag: {arg}")
            sys.exit(1)
        else:
            args.append(arg)
        i += 1

    if not args or args[0] not in COMMANDS:
        print(USAGE)
        sys.exit(1)

    command, text = args[0], " ".join(args[1:])
    if not text and not (command == "detect" or (command == "recipe" and options.get("use_inventory"))):
        print("Error: No input text provided")
        print(USAGE)
        sys.exit(1)
    return command, text, options


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(USAGE)
        sys.exit(1)

    command, text, options = parse_args(sys.argv[1:])
    run_query(command, text, options)
