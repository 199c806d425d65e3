"""
Spoken text for skill responses.

All phrases the skill says live here so turn logic stays free of wording.
"""
import math
from typing import Optional, Sequence

WELCOME = "Welcome to Study Buddy. Please pick a category that you would wish to study from. "
PICK_CATEGORY = "Please pick a category that you would wish to study from. "
PICK_CATEGORY_REPROMPT = "Please pick a category. "
GOODBYE = "See you next time friend!"

CATEGORY_ALREADY_SELECTED = "You have already selected a category. "
QUIZ_ALREADY_SELECTED = "You have already selected a quiz. "
NO_CATEGORY_SELECTED = "Please pick a category before choosing a quiz. "

CORRECT = "Congratulations you are correct! "
TRY_AGAIN = "Incorrect answer. Try again. "
MOVING_ON = "Moving on to the next question. "

NO_QUESTION_TO_ANSWER = "No question to answer. "
NO_QUESTION_TO_REPEAT = "No question to repeat. "
NO_QUESTION_TO_SKIP = "No question to skip. "
NOT_IN_QUIZ = "Currently not doing a quiz. "


def join_options(options: Sequence[str]) -> str:
    """
    Join items the way they are spoken: "a", "a and b", "a, b, and c".

    :param options: Items to join, in order
    :return: Joined phrase (empty for no items)
    """
    items = list(options)
    if not items:
        return ""
    if len(items) == 1:
        return items[0]
    if len(items) == 2:
        return f"{items[0]} and {items[1]}"
    return ", ".join(items[:-1]) + f", and {items[-1]}"


def correct_rate(correct: int, incorrect: int) -> Optional[int]:
    """
    Percentage of correct answers, rounded half up.

    :return: Rate 0-100, or None when nothing has been counted
    """
    total = correct + incorrect
    if total == 0:
        return None
    return int(math.floor(100.0 * correct / total + 0.5))


def quiz_summary(correct: int, incorrect: int) -> str:
    """Stats sentence for a finished quiz (empty when nothing was counted)."""
    rate = correct_rate(correct, incorrect)
    if rate is None:
        return ""
    return (
        f"Great study session. Your stats are {correct} correct and {incorrect} incorrect, "
        f"for a correct rate of {rate} percent. "
    )


def category_selected(category: str, quizzes: Sequence[str]) -> str:
    return f"{category} category selected. {select_quiz_prompt(quizzes)}"


def select_quiz_prompt(quizzes: Sequence[str]) -> str:
    return f"Please select a quiz. Options are {join_options(quizzes)}. "


def unknown_category(category: Optional[str], categories: Sequence[str]) -> str:
    heard = f"I don't have any quizzes for {category}. " if category else "I didn't catch a category. "
    return f"{heard}Categories are {join_options(categories)}. "


def unknown_quiz(quiz_name: Optional[str], quizzes: Sequence[str]) -> str:
    heard = f"I couldn't find a quiz called {quiz_name}. " if quiz_name else "I didn't catch a quiz name. "
    return f"{heard}{select_quiz_prompt(quizzes)}"


def reveal_answer(term: str) -> str:
    return f"The correct answer is {term}. "


def out_of_tries(term: str) -> str:
    return f"You have gotten this question incorrect. {reveal_answer(term)}"
