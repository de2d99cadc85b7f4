"""
Console Test Harness for InterviewFlow (Functional Core)

Simple console loop to run an intake interview before using the Flask API.
"""

import logging
import os
import sys

from intake.core.schema_loader import SchemaLoader, SchemaUnavailable, DEFAULT_SCHEMA_DIR
from intake.core.question_flow import QuestionFlowResolver
from intake.core.trigger_engine import TriggerEngine
from intake.core.requirements_validator import RequirementsValidator, check_project_data
from intake.core.interview_flow import InterviewFlow
from intake.core.complexity import LEVEL_DESCRIPTIONS, TIER_ALIASES, normalize_tier, recommend_level
from intake.utils.review_helpers import group_answers_by_section, build_document_preview

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

EXIT_COMMANDS = ('quit', 'exit', 'stop')
SKIP_COMMAND = 'skip'


def print_separator(char="=", length=60):
    """Print a separator line"""
    print(char * length)


def parse_answer(question, raw):
    """
    Convert console input to an answer value for the question type.

    boolean -> True/False (y/yes/true, n/no/false), multiselect -> list
    split on commas, anything else -> the stripped text. Returns None for
    input that does not fit a boolean question.
    """
    text = raw.strip()

    if question.type == 'boolean':
        lowered = text.lower()
        if lowered in ('y', 'yes', 'true'):
            return True
        if lowered in ('n', 'no', 'false'):
            return False
        return None

    if question.type == 'multiselect':
        return [part.strip() for part in text.split(',') if part.strip()]

    return text


def print_question(question):
    print(f"\n[{question.id}] {question.prompt}")
    if question.hint:
        print(f"  Hint: {question.hint}")
    if question.options:
        print(f"  Options: {', '.join(question.options)}")
    if question.type == 'boolean':
        print("  Answer y/n")
    elif question.type == 'multiselect':
        print("  Separate multiple choices with commas")


def print_review(flow, state):
    """Print answers by section, stage completeness and validation"""
    snapshot = flow.resolver.snapshot()

    print_separator()
    print("REVIEW")
    print_separator()

    for section in group_answers_by_section(state.answers, snapshot):
        print(f"\n{section['title']}")
        for entry in section['answers']:
            print(f"  - {entry['question']}: {entry['display']}")

    print("\nDocument preview:")
    for stage in build_document_preview(state.answers, state.tier):
        print(
            f"  Stage {stage['stage']} {stage['title']}: "
            f"{stage['completeness']}% ({stage['status']})"
        )

    recommended = recommend_level(state.answers, snapshot.tag_schema)
    if recommended != state.canonical_tier:
        print(f"\nNote: answers suggest the '{recommended}' tier ({LEVEL_DESCRIPTIONS[recommended]})")

    report = flow.validate(state)
    project_check = check_project_data(state.answers)

    print()
    if report.valid and project_check.valid:
        print("Validation passed: ready for document generation")
    else:
        print("Validation failed:")
        for error in report.errors + project_check.errors:
            print(f"  - {error}")


def choose_tier():
    print(f"Tier labels: base, {', '.join(TIER_ALIASES)}")
    tier = input("Tier [base]: ").strip() or 'base'
    canonical = normalize_tier(tier)
    if canonical != tier:
        print(f"Using tier '{canonical}'")
    return tier


def choose_tags():
    raw = input("Tag filters (comma separated, blank for all): ").strip()
    return [tag.strip() for tag in raw.split(',') if tag.strip()]


def main():
    """Run console interview"""
    print_separator()
    print("PRE-TDD INTAKE - CONSOLE INTERVIEW")
    print_separator()

    schema_dir = os.environ.get('INTAKE_SCHEMA_DIR', DEFAULT_SCHEMA_DIR)

    try:
        loader = SchemaLoader(schema_dir)
        loader.load()

        # Stateless modules (cached in InterviewFlow)
        resolver = QuestionFlowResolver(loader)
        trigger_engine = TriggerEngine(loader)
        validator = RequirementsValidator(resolver)

        flow = InterviewFlow(resolver, trigger_engine, validator)

        print("\nSchema loaded successfully!")

    except SchemaUnavailable as e:
        print(f"\nFailed to load schema from {schema_dir}: {e}")
        return 1

    print_separator()
    print("STARTING INTERVIEW")
    print_separator()
    print(f"Type {', '.join(repr(c) for c in EXIT_COMMANDS)} to end early, "
          f"'{SKIP_COMMAND}' to leave a question unanswered\n")

    # State is external - we hold it in this loop
    state = flow.start(choose_tier(), choose_tags())
    skipped = set()
    question_count = 0

    while True:
        try:
            pending = [q for q in flow.pending_questions(state) if q.id not in skipped]
            if not pending:
                print_separator()
                print("INTERVIEW COMPLETE")
                print_separator()
                break

            question = pending[0]
            print_question(question)

            user_input = input("> ").strip()

            if user_input.lower() in EXIT_COMMANDS:
                print("\nInterview ended early by user")
                break

            if user_input.lower() == SKIP_COMMAND:
                skipped.add(question.id)
                continue

            if not user_input:
                print("Please enter a response.\n")
                continue

            value = parse_answer(question, user_input)
            if value is None:
                print("Please answer y or n.\n")
                continue

            before = len(state.active_question_ids)
            state = flow.commit_answers(state, {question.id: value})
            question_count += 1

            added = len(state.active_question_ids) - before
            if added:
                print(f"  ({added} follow-up question(s) added)")

        except KeyboardInterrupt:
            print("\n\nInterview interrupted by user (Ctrl+C)")
            break

        except SchemaUnavailable as e:
            print(f"\nERROR: {e}")
            return 1

    print(f"\nQuestions answered: {question_count}")
    print_review(flow, state)

    print_separator()
    print("Console interview complete")
    print_separator()
    return 0


if __name__ == '__main__':
    sys.exit(main())
