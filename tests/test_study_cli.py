"""
Tests for the study CLI, using an httpx mock transport in place of the API.
"""
import json

import httpx
import pytest

from flashcard_trainer.cli.study_cli import KNOWN_QUALITY, UNKNOWN_QUALITY, StudyCLI, build_parser, run_command

CARDS = [
    {"_id": "65a1f0c2e4b0a1b2c3d4e5f6", "front": "dog", "back": "pies"},
    {"_id": "65a1f0c2e4b0a1b2c3d4e5f7", "front": "cat", "back": "kot"},
]


class FakeApi:
    """Records requests and answers like the flashcard API."""

    def __init__(self, cards=None):
        self.cards = CARDS if cards is None else cards
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == "/api/categories" and request.method == "GET":
            return httpx.Response(200, json=["animals", "food"])
        if path == "/api/categories" and request.method == "POST":
            name = json.loads(request.content)["name"]
            if name == "animals":
                return httpx.Response(400, json={"detail": "Category already exists: animals"})
            return httpx.Response(201, json={"message": "Category created"})
        if path == "/api/flashcards":
            return httpx.Response(200, json=self.cards)
        if path.endswith("/review"):
            return httpx.Response(
                200, json={"message": "Flashcard updated", "next_review": "2024-03-02T12:00:00Z", "interval": 1}
            )
        if path == "/api/flashcards/bulk_add":
            return httpx.Response(201, json={"message": "Flashcards added", "inserted": 2, "skipped": ["oops"]})
        return httpx.Response(404, json={"detail": "Not Found"})

    def reviews(self):
        return [
            (r.url.path.split("/")[3], json.loads(r.content)["quality"])
            for r in self.requests
            if r.url.path.endswith("/review")
        ]


@pytest.fixture
def api():
    return FakeApi()


@pytest.fixture
def cli(api):
    return StudyCLI("http://testserver/", transport=httpx.MockTransport(api))


def scripted(*answers):
    replies = iter(answers)
    return lambda prompt: next(replies)


@pytest.mark.asyncio
async def test_fetch_categories(cli):
    assert await cli.fetch_categories() == ["animals", "food"]


@pytest.mark.asyncio
async def test_add_category(cli):
    assert await cli.add_category("verbs") is True
    assert await cli.add_category("animals") is False


@pytest.mark.asyncio
async def test_fetch_flashcards_passes_filters(cli, api):
    await cli.fetch_flashcards(include_all=True, category="animals")

    params = api.requests[0].url.params
    assert params["all"] == "true"
    assert params["category"] == "animals"


@pytest.mark.asyncio
async def test_study_session_submits_known_and_unknown(cli, api):
    output = []

    reviewed = await cli.study(input_fn=scripted("", "y", "", "n"), output_fn=output.append)

    assert reviewed == 2
    assert api.reviews() == [
        ("65a1f0c2e4b0a1b2c3d4e5f6", KNOWN_QUALITY),
        ("65a1f0c2e4b0a1b2c3d4e5f7", UNKNOWN_QUALITY),
    ]
    assert "    pies" in output
    assert "    kot" in output


@pytest.mark.asyncio
async def test_study_session_reprompts_and_quits(cli, api):
    reviewed = await cli.study(input_fn=scripted("", "maybe", "y", "q"), output_fn=lambda line: None)

    assert reviewed == 1
    assert api.reviews() == [("65a1f0c2e4b0a1b2c3d4e5f6", KNOWN_QUALITY)]


@pytest.mark.asyncio
async def test_study_session_without_cards():
    cli = StudyCLI("http://testserver", transport=httpx.MockTransport(FakeApi(cards=[])))
    output = []

    assert await cli.study(input_fn=scripted(), output_fn=output.append) == 0
    assert output == ["No flashcards to review."]


@pytest.mark.asyncio
async def test_bulk_add_command_reads_file(cli, api, tmp_path, capsys):
    words = tmp_path / "words.txt"
    words.write_text("dog; pies\noops\ncat; kot\n", encoding="utf-8")
    args = build_parser().parse_args(["bulk-add", "--category", "animals", str(words)])

    assert await run_command(args, cli) == 0

    sent = json.loads(api.requests[0].content)
    assert sent == {"data": "dog; pies\noops\ncat; kot\n", "category": "animals"}
    assert "Added 2 flashcard(s), skipped 1 line(s)." in capsys.readouterr().out


@pytest.mark.asyncio
async def test_http_errors_return_nonzero():
    def failing(request):
        return httpx.Response(500, json={"detail": "Unable to fetch categories"})

    cli = StudyCLI("http://testserver", transport=httpx.MockTransport(failing))
    args = build_parser().parse_args(["categories"])

    assert await run_command(args, cli) == 1


def test_parser_study_flags():
    args = build_parser().parse_args(["--base-url", "http://api:5001", "study", "--all", "--category", "food"])

    assert args.base_url == "http://api:5001"
    assert args.include_all is True
    assert args.category == "food"


@pytest.mark.asyncio
async def test_study_session_continues_after_rejected_review():
    api = FakeApi()

    def conflicting(request):
        if request.url.path == "/api/flashcards/65a1f0c2e4b0a1b2c3d4e5f6/review":
            api.requests.append(request)
            return httpx.Response(409, json={"detail": "Flashcard was modified or deleted during the review"})
        return api(request)

    cli = StudyCLI("http://testserver", transport=httpx.MockTransport(conflicting))
    output = []

    reviewed = await cli.study(input_fn=scripted("", "y", "", "y"), output_fn=output.append)

    assert reviewed == 1
    assert api.reviews() == [
        ("65a1f0c2e4b0a1b2c3d4e5f6", KNOWN_QUALITY),
        ("65a1f0c2e4b0a1b2c3d4e5f7", KNOWN_QUALITY),
    ]
    assert "    review not saved (409), moving on" in output
    assert output[-1] == "Reviewed 1 flashcard(s)."
