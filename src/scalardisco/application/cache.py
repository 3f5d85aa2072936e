class DescriptionCache:
    """Description documents keyed by their LOCATION URL.

    Entries never expire; only ``clear()`` drops them. Concurrent searches may
    fetch the same URL twice before either stores it, the last store wins.
    """

    def __init__(self) -> None:
        self._documents: dict[str, str] = {}

    def lookup(self, url: str) -> str | None:
        return self._documents.get(url)

    def store(self, url: str, document: str) -> None:
        self._documents[url] = document

    def clear(self) -> None:
        self._documents.clear()

    def __contains__(self, url: object) -> bool:
        return url in self._documents

    def __len__(self) -> int:
        return len(self._documents)
