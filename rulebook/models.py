"""Core data models shared across rulebook components."""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class Document:
    """A single Markdown rule file inside the corpus."""

    path: str
    category: Optional[str]
    title: Optional[str]
    body: str
    size: int
    # Set when undecodable bytes were replaced while reading.
    lossy: bool = False

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]


@dataclass
class Corpus:
    """Normalized view of the rules directory for checks and commands."""

    root: str
    documents: List[Document] = field(default_factory=list)
    files: List[str] = field(default_factory=list)

    def get(self, path: str) -> Optional[Document]:
        for document in self.documents:
            if document.path == path:
                return document
        return None

    def categories(self) -> List[str]:
        return sorted({doc.category for doc in self.documents if doc.category})

    def by_category(self) -> Dict[Optional[str], List[Document]]:
        grouped: Dict[Optional[str], List[Document]] = defaultdict(list)
        for document in self.documents:
            grouped[document.category].append(document)
        return dict(grouped)


@dataclass
class TreeEntry:
    """One path listed in the README file tree."""

    path: str
    is_dir: bool
    line: int
