import pytest

from signals import sine_wave


@pytest.fixture
def sine_ir():
    return sine_wave()


@pytest.fixture
def beat_lengths():
    return [76, 80, 72, 78, 74, 80, 76, 72, 78, 80, 74, 76]
