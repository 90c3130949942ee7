#!/usr/bin/env python3
"""
GiftBank - Interface de linha de comandos
Pesquisa a banca de perguntas GIFT, compõe exames, gera ficheiros para o
Moodle, analisa perfis e abre a simulação de exame.
"""

import argparse
import logging
import sys
from pathlib import Path

from giftbank.app_paths import get_log_path
from giftbank.constants import APP_NAME, APP_VERSION, DEFAULT_EXAM_TITLE
from giftbank.errors import GiftError, GiftFormatError
from giftbank.exam_manager import ExamContext
from giftbank.exam_profile import generate_profile_report, save_profile_to_file
from giftbank.gift_generator import generate_gift_file, get_default_filename, preview_gift_file
from giftbank.history import SimulationHistory
from giftbank.import_export import export_gift_file, import_to_bank
from giftbank.preferences import Preferences
from giftbank.profile_comparator import (
    compare_profiles, generate_comparison_report, save_comparison_report
)
from giftbank.quality_checker import format_report, verify_gift_exam
from giftbank.question_bank import (
    get_available_types, get_question_stats, known_types, parse_gift_file, search_questions
)

logger = logging.getLogger(APP_NAME.lower())

RULE = "─" * 70
_logging_configured = False


def setup_logging(verbose: bool = False):
    """Ficheiro de log na pasta da aplicação e avisos no stderr."""
    global _logging_configured
    if _logging_configured:
        return
    _logging_configured = True

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    file_handler = logging.FileHandler(get_log_path(), encoding='utf-8')
    file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    file_handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(name)s: %(message)s'))
    root.addHandler(file_handler)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    root.addHandler(console)


def _distribution_lines(distribution, total):
    for qtype, count in sorted(distribution.items(), key=lambda x: -x[1]):
        yield f"  {qtype:<20} {count:>2} ({count / total * 100:.1f}%)"


def _print_messages(title, messages):
    print(title)
    for i, message in enumerate(messages, 1):
        print(f"  {i}. {message}")


# ==========================
# BANCA DE PERGUNTAS
# ==========================

def cmd_search(args, prefs):
    qtype, keyword = args.type, args.keyword
    # "search palavra" sem tipo: o primeiro argumento é a palavra-chave
    if qtype and keyword is None and qtype.lower() not in (t.lower() for t in known_types()):
        qtype, keyword = None, qtype

    results = search_questions(args.data_dir, qtype, keyword)
    if not results:
        print("No questions found matching your criteria.")
        print("\nTip: use 'types' to see the available question types.")
        return 0

    shown = results[:args.limit] if args.limit else results
    print(f"Found {len(results)} question(s)")
    if len(shown) < len(results):
        print(f"Showing first {len(shown)} results")
    print()

    for i, result in enumerate(shown, 1):
        question = result.question
        print(f"━━━ Question {i} ━━━")
        print(f"File:  {result.file}")
        print(f"Title: {question.title}")
        print(f"Type:  {question.type}")
        print(f"Text:  {question.question_text}")
        if args.verbose and question.answers:
            print("Answers:")
            for answer in question.answers:
                print(f"  {'✓' if answer.correct else '✗'} {answer.text}")
        print()

    distribution = {}
    for result in results:
        distribution[result.question.type.value] = distribution.get(result.question.type.value, 0) + 1
    print("━━━ Search Summary ━━━")
    print("Question types in results:")
    for qtype_name, count in sorted(distribution.items(), key=lambda x: -x[1]):
        print(f"  {qtype_name}: {count} question(s)")
    return 0


def cmd_stats(args, prefs):
    stats = get_question_stats(args.data_dir)
    print("\n📊 Question Bank Statistics\n")
    print(f"Total files:     {stats.total_files}")
    print(f"Total questions: {stats.total_questions}")
    print(f"Avg per file:    {stats.average_per_file}")

    if stats.total_questions:
        print("\n━━━ Questions by Type ━━━")
        for qtype, count in sorted(stats.by_type.items(), key=lambda x: -x[1]):
            percentage = count / stats.total_questions * 100
            print(f"{qtype:<20} {count:>4} ({percentage:.1f}%) {'█' * int(percentage // 2)}")

    print("\n━━━ Top 10 Files by Question Count ━━━")
    for file_name, count in sorted(stats.by_file.items(), key=lambda x: -x[1])[:10]:
        print(f"{count:>4} questions {file_name}")
    print()
    return 0


def cmd_types(args, prefs):
    print("\n📋 Available Question Types\n")
    for qtype in get_available_types(args.data_dir):
        print(f"  • {qtype}")
    print("\nUse these type names with the 'search' command.")
    print(f"Example: {APP_NAME.lower()} search MultipleChoice\n")
    return 0


def cmd_import(args, prefs):
    summary = import_to_bank(args.file, args.data_dir)
    print(f"✓ Imported {summary.total_questions} question(s) into {summary.destination}")
    for line in _distribution_lines(summary.type_distribution, summary.total_questions):
        print(line)
    return 0


def cmd_export(args, prefs):
    summary = export_gift_file(args.file, args.destination)
    print(f"✓ Exported {summary.total_questions} question(s) to {summary.destination}")
    return 0


# ==========================
# COMPOSIÇÃO DE EXAMES
# ==========================

def _context(args, prefs):
    minimum, maximum = prefs.get_exam_limits()
    return ExamContext(args.exam_file, args.data_dir, minimum, maximum)


def cmd_exam_init(args, prefs):
    exam = _context(args, prefs).init_exam(args.title)
    print(f'✓ New exam created: "{exam.title}"')
    print(f"  Add between {exam.min_questions} and {exam.max_questions} questions with 'exam-add'.")
    return 0


def cmd_exam_add(args, prefs):
    exam = _context(args, prefs).add_question(args.file, args.title)
    print(f'✓ Question "{args.title}" added ({len(exam.questions)}/{exam.max_questions})')
    return 0


def cmd_exam_remove(args, prefs):
    exam, removed = _context(args, prefs).remove_question(args.index)
    print(f'✓ Question "{removed.title}" removed ({len(exam.questions)} left)')
    return 0


def cmd_exam_move(args, prefs):
    _context(args, prefs).move_question(args.source, args.destination)
    print(f"✓ Question moved from position {args.source} to {args.destination}")
    return 0


def cmd_exam_list(args, prefs):
    context = _context(args, prefs)
    exam = context.current()
    if not exam.questions:
        print("\n⚠ No exam in progress or the exam is empty.\n")
        print("Use 'exam-init' to create a new exam and 'exam-add' to add questions.\n")
        return 0

    stats = context.stats()
    print("\n📝 Exam composition\n")
    print(f"Title: {exam.title}")
    print(f"Questions: {stats.question_count}/{stats.max_allowed}")
    print(f"Last modified: {exam.modified_at}")
    if stats.is_valid:
        print("Status: ✓ Valid")
    elif stats.question_count < stats.min_required:
        print(f"Status: ⚠ {stats.min_required - stats.question_count} question(s) missing")
    else:
        print(f"Status: ✗ Too many questions (max: {stats.max_allowed})")

    print("\n━━━ Questions ━━━\n")
    for i, question in enumerate(exam.questions, 1):
        print(f"{i:>2}. {question.title}")
        print(f"    File: {question.file}")
        print(f"    Type: {question.type}")
        if args.verbose:
            text = question.question_text
            print(f"    Text: {text[:100]}{'...' if len(text) > 100 else ''}")
            if question.answers:
                print(f"    Answers: {len(question.answers)}")
        print()

    print("━━━ Statistics ━━━\n")
    print("Distribution by type:")
    for line in _distribution_lines(stats.type_distribution, stats.question_count):
        print(line)
    print(f"\nSource files: {stats.file_count}\n")
    return 0


def cmd_exam_validate(args, prefs):
    validation = _context(args, prefs).validate()
    if validation.valid:
        print("\n✓ The exam is valid.")
    else:
        _print_messages("\n✗ The exam is not valid.\nErrors:", validation.errors)
    if validation.warnings:
        _print_messages("\n⚠ Warnings:", validation.warnings)
    print(f"\nQuestions: {validation.question_count}")
    return 0 if validation.valid else 1


def cmd_exam_clear(args, prefs):
    _context(args, prefs).clear()
    print("✓ Current exam cleared.")
    return 0


def cmd_exam_generate(args, prefs):
    context = _context(args, prefs)
    exam = context.current()
    if not exam.questions:
        raise GiftFormatError("No exam in progress or the exam is empty. "
                              "Use 'exam-init' and 'exam-add' to build one.")

    validation = context.validate(exam)
    if not validation.valid:
        _print_messages("\n✗ The exam is not valid. Cannot generate the GIFT file.\nErrors:",
                        validation.errors)
        return 1

    output_dir = Path(args.output or prefs.get_output_dir())
    output_path = output_dir / (args.filename or get_default_filename(exam.title))
    if output_path.exists() and not args.force:
        print(f'\n⚠ File "{output_path}" already exists. Use --force to overwrite it.\n')
        return 1

    result = generate_gift_file(exam, output_path)
    print("✓ GIFT file generated!\n")
    print(f"File: {result.path}")
    print(f"Size: {result.size / 1024:.2f} KB")
    print(f"Questions: {result.question_count}")
    if result.validation.warnings:
        _print_messages("\n⚠ Warnings:", result.validation.warnings)
    print("\n💡 The file is ready to be imported into Moodle.\n")
    return 0


def cmd_exam_preview(args, prefs):
    exam = _context(args, prefs).current()
    if not exam.questions:
        raise GiftFormatError("No exam in progress or the exam is empty.")

    preview = preview_gift_file(exam, args.lines)
    print("\n📄 GIFT file preview\n")
    print(RULE)
    print(preview.content)
    print(RULE)
    if preview.truncated:
        print(f"\n⚠ Truncated preview: {preview.showing_lines}/{preview.total_lines} lines shown")
    else:
        print(f"\n✓ Full preview: {preview.total_lines} lines\n")
    return 0


# ==========================
# ANÁLISE
# ==========================

def cmd_check(args, prefs):
    minimum, maximum = prefs.get_exam_limits()
    result = verify_gift_exam(args.file, minimum, maximum)
    print(format_report(result, args.file))
    return 0 if result.valid else 1


def cmd_profile(args, prefs):
    report = generate_profile_report(args.file)
    print(report.histogram)
    if args.save:
        save_profile_to_file(report.histogram, args.save)
        print(f"✓ Profile saved to {args.save}")
    return 0


def cmd_compare(args, prefs):
    report = generate_comparison_report(compare_profiles(args.exam, args.bank))
    print(report)
    if args.save:
        save_comparison_report(report, args.save)
        print(f"✓ Report saved to {args.save}")
    return 0


# ==========================
# SIMULAÇÃO
# ==========================

def _load_for_window(path, prefs):
    questions = parse_gift_file(path)
    if not questions:
        raise GiftFormatError(f"No question found in {path}. Check the GIFT format.")
    prefs.set_last_gift_file(str(Path(path).resolve()))
    return questions


def cmd_simulate(args, prefs):
    from giftbank.simulator_app import run_simulator
    return run_simulator(_load_for_window(args.file, prefs), args.file)


def cmd_browse(args, prefs):
    from giftbank.simulator_app import run_browser
    return run_browser(_load_for_window(args.file, prefs), args.file)


def cmd_history(args, prefs):
    history = SimulationHistory()
    if args.clear:
        history.clear_history()
        print("✓ Simulation history cleared.")
        return 0

    stats = history.get_statistics(args.file)
    print("\n📈 Simulation history\n")
    print(f"Simulations: {stats['total_simulations']}")
    if not stats['total_simulations']:
        print()
        return 0
    print(f"Average: {stats['average_percentage']:.2f}%")
    print(f"Best note: {stats['best_note']:.2f}/20\n")
    for record in history.get_recent(args.limit, args.file):
        print(f"{record['date']} {record['time']}  {record['percentage']:>6.2f}%  "
              f"{record['note']:>5.2f}/20  {Path(record['gift_file']).name}")
    print()
    return 0


# ==========================
# FUNÇÃO PRINCIPAL (MAIN)
# ==========================

def build_parser(prefs: Preferences) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=APP_NAME.lower(),
                                     description="GIFT question bank, exam composition and simulation.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    parser.add_argument("-V", "--debug", action="store_true", help="Show debug logging on stderr.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- Argumentos comuns ---
    data_parent = argparse.ArgumentParser(add_help=False)
    data_parent.add_argument("-d", "--data-dir", default=prefs.get_data_dir(),
                             help=f"Directory containing GIFT files (default: {prefs.get_data_dir()})")
    exam_parent = argparse.ArgumentParser(add_help=False, parents=[data_parent])
    exam_parent.add_argument("--exam-file", help="Current exam file (default: in the application data folder).")

    search = subparsers.add_parser("search", parents=[data_parent], help="Search questions in the bank.")
    search.add_argument("type", nargs="?", help="Question type (e.g. MultipleChoice, ShortAnswer).")
    search.add_argument("keyword", nargs="?", help="Keyword in title, text or content.")
    search.add_argument("-v", "--verbose", action="store_true", help="Show the answers.")
    search.add_argument("-l", "--limit", type=int, help="Limit the number of results displayed.")
    search.set_defaults(func=cmd_search)

    subparsers.add_parser("stats", parents=[data_parent],
                          help="Question bank statistics.").set_defaults(func=cmd_stats)
    subparsers.add_parser("types", parents=[data_parent],
                          help="Question types present in the bank.").set_defaults(func=cmd_types)

    imp = subparsers.add_parser("import", parents=[data_parent], help="Copy a GIFT file into the bank.")
    imp.add_argument("file")
    imp.set_defaults(func=cmd_import)

    exp = subparsers.add_parser("export", help="Copy a valid GIFT file to a file or folder.")
    exp.add_argument("file")
    exp.add_argument("destination")
    exp.set_defaults(func=cmd_export)

    init = subparsers.add_parser("exam-init", parents=[exam_parent], help="Start a new exam.")
    init.add_argument("title", nargs="?", default=DEFAULT_EXAM_TITLE)
    init.set_defaults(func=cmd_exam_init)

    add = subparsers.add_parser("exam-add", parents=[exam_parent], help="Add a question to the exam.")
    add.add_argument("file", help="GIFT file name inside the data directory.")
    add.add_argument("title", help="Question title (quote it if it has spaces).")
    add.set_defaults(func=cmd_exam_add)

    remove = subparsers.add_parser("exam-remove", parents=[exam_parent], help="Remove a question (1-based).")
    remove.add_argument("index", type=int)
    remove.set_defaults(func=cmd_exam_remove)

    move = subparsers.add_parser("exam-move", parents=[exam_parent], help="Move a question (1-based).")
    move.add_argument("source", type=int, metavar="from")
    move.add_argument("destination", type=int, metavar="to")
    move.set_defaults(func=cmd_exam_move)

    lst = subparsers.add_parser("exam-list", parents=[exam_parent], help="Show the current exam.")
    lst.add_argument("-v", "--verbose", action="store_true")
    lst.set_defaults(func=cmd_exam_list)

    subparsers.add_parser("exam-validate", parents=[exam_parent],
                          help="Validate the current exam.").set_defaults(func=cmd_exam_validate)
    subparsers.add_parser("exam-clear", parents=[exam_parent],
                          help="Discard the current exam.").set_defaults(func=cmd_exam_clear)

    generate = subparsers.add_parser("exam-generate", parents=[exam_parent], help="Write the exam as GIFT.")
    generate.add_argument("filename", nargs="?", help="Output file name (default: from the exam title).")
    generate.add_argument("-o", "--output", help=f"Output directory (default: {prefs.get_output_dir()})")
    generate.add_argument("-f", "--force", action="store_true", help="Overwrite an existing file.")
    generate.set_defaults(func=cmd_exam_generate)

    preview = subparsers.add_parser("exam-preview", parents=[exam_parent], help="Preview the GIFT output.")
    preview.add_argument("-l", "--lines", type=int, default=30)
    preview.set_defaults(func=cmd_exam_preview)

    check = subparsers.add_parser("check", help="Quality check of a GIFT exam file.")
    check.add_argument("file")
    check.set_defaults(func=cmd_check)

    profile = subparsers.add_parser("profile", help="Question type histogram of a GIFT file.")
    profile.add_argument("file")
    profile.add_argument("-s", "--save", help="Also save the profile to this file.")
    profile.set_defaults(func=cmd_profile)

    compare = subparsers.add_parser("compare", help="Compare an exam profile with the bank.")
    compare.add_argument("exam")
    compare.add_argument("bank", help="GIFT file or directory.")
    compare.add_argument("-s", "--save", help="Also save the report to this file.")
    compare.set_defaults(func=cmd_compare)

    simulate = subparsers.add_parser("simulate", help="Take an exam in the simulation window.")
    simulate.add_argument("file")
    simulate.set_defaults(func=cmd_simulate)

    browse = subparsers.add_parser("browse", help="Browse the questions of a GIFT file.")
    browse.add_argument("file")
    browse.set_defaults(func=cmd_browse)

    history = subparsers.add_parser("history", help="Past simulation results.")
    history.add_argument("file", nargs="?", help="Only simulations of this GIFT file.")
    history.add_argument("-l", "--limit", type=int, default=10)
    history.add_argument("--clear", action="store_true", help="Delete the history.")
    history.set_defaults(func=cmd_history)

    return parser


def main(argv=None) -> int:
    """Função principal."""
    prefs = Preferences()
    args = build_parser(prefs).parse_args(argv)
    setup_logging(args.debug)
    logger.debug("Running %s", args.command)

    try:
        return args.func(args, prefs)
    except GiftError as e:
        logger.info("%s failed (%s): %s", args.command, e.error_type, e)
        print(f"\n✗ Error: {e}\n")
        return 1


if __name__ == "__main__":
    sys.exit(main())
