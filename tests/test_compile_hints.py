from examtex.compile_hints import (
    GENERIC_FAILURE, INVALID_COMMAND_HINT, MATH_MODE_HINT, MISSING_PACKAGE_HINT, diagnose_log,
)


def test_missing_dollar_gives_math_hint():
    log = "This is pdfTeX\n! Missing $ inserted.\n<inserted text>\nl.14 x_1"
    assert diagnose_log(log) == MATH_MODE_HINT


def test_undefined_control_sequence_quotes_log():
    log = "! Undefined control sequence.\nl.22 \\foobar\n{x}\n"
    msg = diagnose_log(log)
    assert msg.startswith("Undefined control sequence.")
    assert "\\foobar" in msg
    assert len(msg) <= 200
    assert msg != INVALID_COMMAND_HINT


def test_package_error_wins_over_earlier_rules():
    log = (
        "! Missing $ inserted.\n"
        "! Undefined control sequence.\n"
        "! Package inputenc Error: Unicode character not set up.\n"
    )
    assert diagnose_log(log) == MISSING_PACKAGE_HINT


def test_other_errors_are_excerpted_and_truncated():
    log = "ok\n! Emergency stop.\n<*> questions.tex\nline three\nline four\n"
    assert diagnose_log(log) == "! Emergency stop.\n<*> questions.tex\nline three"

    noisy = "\n".join(f"! Error number {i} " + "x" * 60 for i in range(5))
    msg = diagnose_log(noisy)
    assert len(msg) == 300
    assert " | " in msg


def test_nothing_recognizable():
    assert diagnose_log("") == GENERIC_FAILURE
    assert diagnose_log(None) == GENERIC_FAILURE
    assert diagnose_log("Output written on questions.pdf") == GENERIC_FAILURE
