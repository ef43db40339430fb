from callbarrier.__main__ import args, main


def test_args_defaults():
    parsed = args([])
    assert parsed.workers == 3
    assert parsed.delay == 0.1
    assert parsed.timeout == 10.0
    assert parsed.port == 5555
    assert parsed.payload == "ping"
    assert not parsed.verbose


def test_args():
    parsed = args(["-w", "2", "--port", "5567", "-t", "1.5", "-p", "pong", "-v"])
    assert parsed.workers == 2
    assert parsed.port == 5567
    assert parsed.timeout == 1.5
    assert parsed.payload == "pong"
    assert parsed.verbose


def test_main(capsys):
    main(["-w", "2", "--port", "5568", "-d", "0"])

    out = capsys.readouterr().out
    assert out.splitlines() == ["echo-0: ping", "echo-1: ping"]
