import sys
from pathlib import Path

# Add the project root (one level up from 'test') to sys.path
project_root = Path(__file__).resolve().parents[1]
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import pytest

from SnapDict.core.registry import Registry


def test_aliases_and_case_resolve_to_canonical_name():
    reg = Registry('OCR backend')
    reg.register('tesseract', lambda: 'engine', aliases=('Tess',))
    assert reg.resolve('TESS') == 'tesseract'
    assert 'Tesseract' in reg
    assert reg.create(' tess ') == 'engine'
    assert reg.names() == ['tesseract']


def test_unknown_name_lists_supported():
    reg = Registry('OCR backend')
    reg.register('stub', object)
    assert reg.resolve('missing') is None
    with pytest.raises(KeyError, match='stub'):
        reg.create('missing')


def test_duplicate_registration_rejected():
    reg = Registry()
    reg.register('stub', object, aliases=('none',))
    with pytest.raises(ValueError):
        reg.register('None', object)
