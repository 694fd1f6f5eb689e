import logging

from reconlens.steps import StepLog, step_type


def test_lines_are_prefixed_and_mirrored(caplog):
    seen = []
    steps = StepLog(logging.getLogger("reconlens.test"), on_step=seen.append)
    with caplog.at_level(logging.INFO, logger="reconlens.test"):
        steps.system("start")
        steps.info("working")
        steps.success("ok")
        steps.warning("careful")
        steps.negative("closed")

    assert steps.lines == ["[*] start", "[+] working", "[✓] ok", "[!] careful", "[-] closed"]
    assert seen == steps.lines
    assert len(steps) == 5
    levels = [r.levelno for r in caplog.records]
    assert levels == [logging.INFO] * 3 + [logging.WARNING, logging.INFO]


def test_lines_snapshot_is_a_copy():
    steps = StepLog(logging.getLogger("reconlens.test"))
    steps.info("a")
    snapshot = steps.lines
    steps.info("b")
    assert snapshot == ["[+] a"]


def test_step_type():
    assert step_type("[*] x") == "system"
    assert step_type("[✓] x") == "success"
    assert step_type("[!] x") == "warning"
    assert step_type("[-] x") == "negative"
    assert step_type("[+]   → nested") == "info"
    assert step_type("no prefix") == "info"
