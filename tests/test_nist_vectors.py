import glob
import os

import pytest

import nist_vectors
from nist_vectors import Vector

VECTOR_DIR = os.path.join(os.path.dirname(__file__), 'vectors')
RSP_FILES = sorted(glob.glob(os.path.join(VECTOR_DIR, '*.rsp')))

SAMPLE = """\
#  CAVS 19.0
#  "SHA3-256 ShortMsg" information for "SHA3AllBytes1-28-16"
#  Length values represented in bits

[L = 256]

Len = 0
Msg = 00
MD = a7ffc6f8bf1ed76651c14756a061d662f580ff4de43b49fa82d80a4b80f8434a

Len = 24
Msg = 616263
MD = 3A985DA74FE225B2045C172D6BD390BD855F086E3E9D525B46BFE24511431532
"""


@pytest.mark.parametrize('path', RSP_FILES, ids=os.path.basename)
def test_nist_vector_file(path):
    passed, failures = nist_vectors.validate_file(path)
    assert failures == []
    assert passed > 0


def test_fixture_files_cover_every_size():
    sizes = {nist_vectors.size_from_filename(p) for p in RSP_FILES}
    assert sizes == {224, 256, 384, 512}


@pytest.mark.parametrize('name, size', [
    ('SHA3_224ShortMsg.rsp', 224),
    ('/tmp/x/SHA3_256LongMsg.rsp', 256),
    ('sha3-384ShortMsg.rsp', 384),
    ('SHA3_512LongMsg.rsp', 512),
    ('SHAKE128ShortMsg.rsp', None),
    ('SHA256ShortMsg.rsp', None),
])
def test_size_from_filename(name, size):
    assert nist_vectors.size_from_filename(name) == size


def test_parse_rsp():
    vectors = list(nist_vectors.parse_rsp(SAMPLE.splitlines()))
    assert vectors == [
        Vector(0, b'',
               'a7ffc6f8bf1ed76651c14756a061d662'
               'f580ff4de43b49fa82d80a4b80f8434a'),
        Vector(24, b'abc',
               '3a985da74fe225b2045c172d6bd390bd'
               '855f086e3e9d525b46bfe24511431532'),
    ]


@pytest.mark.parametrize('text', [
    'Len = 5\nMsg = 00\nMD = 00\n',
    'Len = 16\nMsg = 00\nMD = 00\n',
    'Msg = 00\nMD = 00\n',
    'Len = 8\nMD = 00\n',
    'Len = 8\nMsg = zz\nMD = 00\n',
])
def test_parse_rsp_rejects_malformed(text):
    with pytest.raises(ValueError):
        list(nist_vectors.parse_rsp(text.splitlines()))


def test_validate_file_reports_failures(tmp_path):
    path = tmp_path / 'SHA3_256ShortMsg.rsp'
    path.write_text(SAMPLE.replace('MD = a7ff', 'MD = 00ff'))
    passed, failures = nist_vectors.validate_file(str(path))
    assert passed == 1
    assert [v.length for v in failures] == [0]


def test_validate_file_size_override(tmp_path):
    path = tmp_path / 'vectors.rsp'
    path.write_text(SAMPLE)
    with pytest.raises(ValueError):
        nist_vectors.validate_file(str(path))
    assert nist_vectors.validate_file(str(path), 256) == (2, [])


def test_main(capsys, tmp_path):
    bad = tmp_path / 'SHA3_256ShortMsg.rsp'
    bad.write_text(SAMPLE.replace('MD = a7ff', 'MD = 00ff'))

    assert nist_vectors.main(RSP_FILES) == 0
    out = capsys.readouterr().out
    assert 'SHA3_256ShortMsg.rsp: 2 passed, 0 failed' in out

    assert nist_vectors.main([str(bad)]) == 1
    assert nist_vectors.main([str(tmp_path / 'missing.rsp')]) == 1
