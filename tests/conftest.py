import pytest

from proxitour.domain.models import Landmark


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = float(start)

    def monotonic(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += float(seconds)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def mexico_city_landmarks():
    return [
        Landmark(id="zocalo", name="Zócalo", coordinates=(-99.1328, 19.4326)),
        Landmark(id="templo-mayor", name="Templo Mayor", coordinates=(-99.1308, 19.4353)),
        Landmark(id="bellas-artes", name="Palacio de Bellas Artes", coordinates=(-99.1353, 19.4373)),
        Landmark(id="chapultepec-park", name="Chapultepec Park", coordinates=(-99.1944, 19.4189)),
        Landmark(id="teotihuacan", name="Teotihuacan", coordinates=(-98.8497, 19.6944)),
    ]
