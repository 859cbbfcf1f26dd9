"""
Command-line client for studying and entering vocabulary.

Talks to the Flashcard Trainer API over HTTP:

    flashcard-trainer-cli categories
    flashcard-trainer-cli add-category animals
    flashcard-trainer-cli study --category animals
    flashcard-trainer-cli study --all
    flashcard-trainer-cli bulk-add --category animals words.txt

During a study session each card's front is shown; press Enter to reveal the back, then
answer whether you knew it. "Yes" is submitted as quality 5, "no" as quality 2.
"""

import argparse
import asyncio
import sys
from typing import Any, Callable, Dict, List, Optional

import httpx

from flashcard_trainer.config import settings
from flashcard_trainer.managers.logging_manager import get_logger

logger = get_logger(prefix="[StudyCLI]")

KNOWN_QUALITY = 5
UNKNOWN_QUALITY = 2


class StudyCLI:
    """HTTP client for the flashcard API."""

    def __init__(self, base_url: str, transport: Optional[httpx.AsyncBaseTransport] = None, timeout: float = 30.0):
        """
        Args:
            base_url: Base URL of the Flashcard Trainer API
            transport: Optional httpx transport (used by tests)
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.transport = transport
        self.timeout = timeout

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, transport=self.transport, timeout=self.timeout)

    async def fetch_categories(self) -> List[str]:
        async with self._client() as client:
            response = await client.get("/api/categories")
            response.raise_for_status()
            return response.json()

    async def add_category(self, name: str) -> bool:
        async with self._client() as client:
            response = await client.post("/api/categories", json={"name": name})

        if response.status_code != 201:
            logger.error(f"Adding category failed: {response.text}")
            return False
        logger.info(f"Category {name} created")
        return True

    async def fetch_flashcards(self, include_all: bool = False, category: Optional[str] = None) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {"all": "true" if include_all else "false"}
        if category:
            params["category"] = category

        async with self._client() as client:
            response = await client.get("/api/flashcards", params=params)
            response.raise_for_status()
            return response.json()

    async def submit_review(self, flashcard_id: str, quality: int) -> Dict[str, Any]:
        async with self._client() as client:
            response = await client.post(f"/api/flashcards/{flashcard_id}/review", json={"quality": quality})
            response.raise_for_status()
            return response.json()

    async def bulk_add(self, data: str, category: str) -> Optional[Dict[str, Any]]:
        """
        Send bulk vocabulary text.

        Returns:
            The API response body, or None if the request was rejected
        """
        async with self._client() as client:
            response = await client.post("/api/flashcards/bulk_add", json={"data": data, "category": category})

        if response.status_code != 201:
            logger.error(f"Bulk add failed: {response.text}")
            return None

        body = response.json()
        for line in body.get("skipped", []):
            logger.warning(f"Skipped line: {line!r}")
        return body

    async def study(
        self,
        include_all: bool = False,
        category: Optional[str] = None,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
    ) -> int:
        """
        Run an interactive study session.

        Returns:
            Number of cards reviewed
        """
        cards = await self.fetch_flashcards(include_all=include_all, category=category)
        if not cards:
            output_fn("No flashcards to review.")
            return 0

        reviewed = 0
        for index, card in enumerate(cards, start=1):
            output_fn(f"[{index}/{len(cards)}] {card['front']}")
            if input_fn("Press Enter to show the translation (q to quit) ").strip().lower() == "q":
                break
            output_fn(f"    {card['back']}")

            answer = ""
            while answer not in ("y", "n", "q"):
                answer = input_fn("Did you know it? [y/n/q] ").strip().lower()
            if answer == "q":
                break

            quality = KNOWN_QUALITY if answer == "y" else UNKNOWN_QUALITY
            try:
                result = await self.submit_review(card["_id"], quality)
            except httpx.HTTPStatusError as e:
                logger.warning(f"Review of {card['_id']} not saved: {e.response.status_code} {e.response.text}")
                output_fn(f"    review not saved ({e.response.status_code}), moving on")
                continue
            output_fn(f"    next review: {result['next_review']} (in {result['interval']} day(s))")
            reviewed += 1

        output_fn(f"Reviewed {reviewed} flashcard(s).")
        return reviewed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="flashcard-trainer-cli", description="Study and enter vocabulary flashcards")
    parser.add_argument("--base-url", default=settings.API_BASE_URL, help="Flashcard Trainer API base URL")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("categories", help="List categories")

    add_category = subparsers.add_parser("add-category", help="Create a category")
    add_category.add_argument("name")

    study = subparsers.add_parser("study", help="Review flashcards")
    study.add_argument("--category", default=None, help="Only this category")
    study.add_argument("--all", action="store_true", dest="include_all", help="Review every card, not only due ones")

    bulk = subparsers.add_parser("bulk-add", help="Add flashcards from 'front; back' lines")
    bulk.add_argument("--category", required=True)
    bulk.add_argument("file", nargs="?", default="-", help="Input file ('-' for stdin)")

    return parser


async def run_command(args: argparse.Namespace, cli: StudyCLI) -> int:
    try:
        if args.command == "categories":
            for name in await cli.fetch_categories():
                print(name)
            return 0

        if args.command == "add-category":
            return 0 if await cli.add_category(args.name) else 1

        if args.command == "study":
            await cli.study(include_all=args.include_all, category=args.category)
            return 0

        if args.command == "bulk-add":
            if args.file == "-":
                data = sys.stdin.read()
            else:
                with open(args.file, encoding="utf-8") as f:
                    data = f.read()
            result = await cli.bulk_add(data, args.category)
            if result is None:
                return 1
            print(f"Added {result['inserted']} flashcard(s), skipped {len(result.get('skipped', []))} line(s).")
            return 0

    except httpx.HTTPError as e:
        logger.error(f"Request failed: {e}")
        return 1

    return 2


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return asyncio.run(run_command(args, StudyCLI(args.base_url)))


if __name__ == "__main__":
    sys.exit(main())
