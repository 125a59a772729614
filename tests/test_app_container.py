import pytest

from app_shop.app_container import AppContainer, get_container
from app_shop.repositories import HttpGateway, JsonFileGateway
from app_shop.services import DataFacade

from conftest import SEED_FILE


@pytest.fixture(autouse=True)
def fresh_container():
    AppContainer.reset_instance()
    yield
    AppContainer.reset_instance()


def test_container_is_singleton(tmp_path):
    first = get_container(remote_url='', data_dir=str(tmp_path), seed_file=SEED_FILE)
    second = get_container(remote_url='http://ignored.test')

    assert first is second
    assert first.facade is second.facade


def test_without_remote_url_uses_json_files(tmp_path):
    container = AppContainer(remote_url='', data_dir=str(tmp_path), seed_file=SEED_FILE)

    gateways = container.gateways

    assert set(gateways) == {'customers', 'products', 'employees', 'receipts', 'services'}
    assert all(isinstance(g, JsonFileGateway) for g in gateways.values())


def test_with_remote_url_uses_http(tmp_path):
    container = AppContainer(remote_url='http://backend.test/rest/v1', data_dir=str(tmp_path), seed_file=SEED_FILE)

    gateway = container.gateways['products']

    assert isinstance(gateway, HttpGateway)
    assert gateway.mapping.resource == 'products'


def test_seed_is_read_per_collection(tmp_path):
    container = AppContainer(remote_url='', data_dir=str(tmp_path), seed_file=SEED_FILE)

    seed = container.load_seed()

    assert [row['name'] for row in seed['customers']] == ['João Silva', 'Maria Oliveira']
    assert len(seed['receipts']) == 2


def test_missing_seed_file_gives_empty_collections(tmp_path):
    container = AppContainer(remote_url='', data_dir=str(tmp_path), seed_file=str(tmp_path / 'nada.json'))

    assert container.load_seed() == {'customers': [], 'products': [], 'employees': [], 'receipts': [], 'services': []}


async def test_facade_over_empty_json_backend(tmp_path):
    container = AppContainer(remote_url='', data_dir=str(tmp_path), seed_file=SEED_FILE)
    facade = container.facade
    assert isinstance(facade, DataFacade)

    await facade.load_all()
    assert not facade.is_degraded
    assert facade.customers == []

    customer = await facade.add_customer({'name': 'Pedro Santos'})
    assert (tmp_path / 'customers.json').exists()
    assert not customer.id.startswith('local-')


def test_reset_drops_lazy_instances(tmp_path):
    container = AppContainer(remote_url='', data_dir=str(tmp_path), seed_file=SEED_FILE)
    facade = container.facade

    container.reset()

    assert container.facade is not facade
