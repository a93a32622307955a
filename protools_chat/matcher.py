from dataclasses import dataclass
from typing import Optional

from .config import MATCH_THRESHOLD
from .knowledge import KnowledgeBase, KnowledgeEntry


@dataclass(frozen=True)
class MatchResult:
    found: bool
    entry: Optional[KnowledgeEntry]
    score: int


class Matcher:
    """
    Bag-of-substrings scorer over the knowledge base.

    Each keyword found anywhere in the lowercased message is worth two points
    per word in the keyword; the first word of the entry's question label adds
    one more. The highest score wins (earliest entry on ties) if it reaches the
    threshold.
    """

    def __init__(self, knowledge_base: KnowledgeBase, threshold: int = MATCH_THRESHOLD):
        self.knowledge_base = knowledge_base
        self.threshold = threshold

    @staticmethod
    def score(entry: KnowledgeEntry, message: str) -> int:
        text = (message or "").lower()
        score = 0
        for keyword in entry.keywords:
            if keyword in text:
                score += len(keyword.split()) * 2
        lead = entry.lead_word
        if lead and lead in text:
            score += 1
        return score

    def match(self, user_message: str) -> MatchResult:
        text = (user_message or "").lower()
        best_entry = None
        best_score = 0
        for entry in self.knowledge_base:
            s = self.score(entry, text)
            if s > best_score:
                best_score = s
                best_entry = entry

        if best_entry is not None and best_score >= self.threshold:
            return MatchResult(found=True, entry=best_entry, score=best_score)
        return MatchResult(found=False, entry=None, score=best_score)
