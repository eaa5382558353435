import re

from conftest import FixedRandomSource

from spotbackup.auth import (
    CODE_VERIFIER_LENGTH,
    RandomSource,
    generate_code_challenge,
    generate_random_string,
    new_pkce_pair,
)

URL_SAFE = re.compile(r"^[A-Za-z0-9_-]+$")


def test_code_challenge_matches_rfc7636_example() -> None:
    verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"

    assert generate_code_challenge(verifier) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"


def test_code_challenge_has_no_padding() -> None:
    challenge = generate_code_challenge("a" * 128)

    assert "=" not in challenge
    assert len(challenge) == 43


def test_random_string_length_and_alphabet() -> None:
    for length in (16, 128):
        value = generate_random_string(length, RandomSource())
        assert len(value) == length
        assert URL_SAFE.match(value)


def test_random_string_uses_injected_source() -> None:
    source = FixedRandomSource(b"a")

    value = generate_random_string(16, source)

    assert source.calls == [16]
    assert value == "YWFhYWFhYWFhYWFh"


def test_new_pkce_pair_binds_challenge_to_verifier() -> None:
    pair = new_pkce_pair(RandomSource())

    assert len(pair.code_verifier) == CODE_VERIFIER_LENGTH
    assert pair.code_challenge == generate_code_challenge(pair.code_verifier)
