"""
Demo: Evaluate a component's argument block against a note's frontmatter.
"""

from argexpr import evaluate_args, evaluate_expression
from argexpr.analyzer import analyze_args
from argexpr.serialization import expr_to_yaml
from argexpr.lexer import tokenize
from argexpr.parser import parse


FRONTMATTER = {
    "title": "Daily Note 2026-01-12",
    "status": "active",
    "count": 15,
    "tags": ["journal", "work"],
    "user": {"name": "Alice"},
}

ARGS = {
    "path": "/daily/notes",
    "limit": "fm.count ?? 10",
    "label": 'if(fm.status == "active", "Open", "Closed")',
    "owner": "fm.user.name || \"nobody\"",
    "isWork": 'contains(fm.tags, "work")',
    "date": "2026-01-12",
    "enabled": "length(fm.tags) > 1",
}


def print_report(report):
    """Pretty-print an ArgsReport."""
    print()
    print("=" * 70)
    print("ARGUMENT ANALYSIS")
    print("=" * 70)
    print(f"  Total Args:            {report.total_args}")
    print(f"  Expressions:           {report.expression_args}")
    print(f"  Plain Text:            {report.literal_args}")
    print(f"  fm keys:               {report.fm_keys}")
    print(f"  Max Expression Depth:  {report.max_expression_depth}")
    print()
    if report.normalized:
        print("  Normalized:")
        for name, text in report.normalized.items():
            print(f"    {name}: {text}")
        print()
    if report.warnings:
        print(f"  Warnings ({len(report.warnings)}):")
        for warning in report.warnings:
            print(f"    - {warning}")
    print()


def main():
    print("=" * 70)
    print("EVALUATED ARGUMENTS")
    print("=" * 70)
    result = evaluate_args(ARGS, FRONTMATTER)
    for name, value in result.args.items():
        print(f"  {name:<10} {ARGS[name]!r:<45} -> {value}")
    print()
    print(f"  Watched fm keys:   {result.fm_keys}")
    print(f"  Watched file keys: {result.file_keys}")

    print_report(analyze_args(ARGS))

    print("AST for the label argument (YAML):")
    print(expr_to_yaml(parse(tokenize(ARGS["label"]))))

    single = evaluate_expression("fm.count * 2 + 1", FRONTMATTER)
    print(f"fm.count * 2 + 1 -> {single.value} (keys: {single.referenced_keys.fm_keys})")


if __name__ == "__main__":
    main()
