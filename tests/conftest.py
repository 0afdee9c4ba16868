import pytest

PACKER_FN = "function(p,a,c,k,e,d){while(c--)if(k[c])p=p.replace(new RegExp(c.toString(a)),k[c]);return p}"


def pack(body, radix, words, quote="'", count=None):
    """Wrap `body`/`words` in the p,a,c,k,e,d call shape player pages use."""
    count = len(words) if count is None else count
    return (
        f"<script>eval({PACKER_FN}({quote}{body}{quote},{radix},{count},"
        f"{quote}{'|'.join(words)}{quote}.split({quote}|{quote}),0,{{}}))</script>"
    )


class FakeFetcher:
    """In-memory stand-in for Fetcher. Unknown URLs raise like a failed request."""

    def __init__(self, pages=None, json_pages=None):
        self.pages = dict(pages or {})
        self.json_pages = dict(json_pages or {})
        self.calls = []
        self.closed = False

    async def get(self, url, *, headers=None, **kwargs):
        self.calls.append((url, dict(headers or {})))
        if url not in self.pages:
            raise ConnectionError(f"unexpected fetch: {url}")
        page = self.pages[url]
        if isinstance(page, Exception):
            raise page
        return page

    async def get_json(self, url, *, headers=None, **kwargs):
        self.calls.append((url, dict(headers or {})))
        if url not in self.json_pages:
            raise ConnectionError(f"unexpected fetch: {url}")
        return self.json_pages[url]

    async def close(self):
        self.closed = True


@pytest.fixture
def packer():
    return pack


@pytest.fixture
def fake_fetcher():
    return FakeFetcher
