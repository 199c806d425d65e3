from .quiz_fetcher import HttpQuizSetFetcher, QuizSetFetcher, parse_terms

__all__ = [
    "QuizSetFetcher",
    "HttpQuizSetFetcher",
    "parse_terms",
]
