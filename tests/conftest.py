import asyncio
import copy
import json
import os

import pytest

from app_shop.errors import NotFoundError, TransportError
from app_shop.models import Customer, Employee, Product, Receipt, ServiceOrder
from app_shop.services import DataFacade

SEED_FILE = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'app_shop', 'data', 'fallback_seed.json')


class FakeGateway:
    """
    Backend en memoria para tests.

    fail=True  → toda operación lanza TransportError
    delay      → segundos de espera antes de responder (para timeouts)
    calls      → operaciones recibidas, en orden
    """

    def __init__(self, entity_cls, rows=None):
        self.entity_cls = entity_cls
        self.entities = [entity_cls.from_dict(row) for row in rows or []]
        self.fail = False
        self.delay = 0.0
        self.calls = []
        self._next_id = 100

    async def _enter(self, operation):
        self.calls.append(operation)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise TransportError(f"backend caído ({operation})", operation, self.entity_cls.ENTITY_NAME)

    def _find(self, entity_id):
        for index, entity in enumerate(self.entities):
            if entity.id == entity_id:
                return index
        raise NotFoundError(self.entity_cls.ENTITY_NAME, entity_id)

    async def list(self):
        await self._enter('list')
        return list(self.entities)

    async def create(self, data):
        await self._enter('create')
        self._next_id += 1
        entity = self.entity_cls.build(data, f"srv-{self._next_id}")
        self.entities.insert(0, entity)
        return entity

    async def update(self, entity_id, data):
        await self._enter('update')
        index = self._find(entity_id)
        self.entities[index] = self.entities[index].merged(data)
        return self.entities[index]

    async def delete(self, entity_id):
        await self._enter('delete')
        self.entities.pop(self._find(entity_id))


@pytest.fixture
def seed():
    with open(SEED_FILE, 'r', encoding='utf-8') as f:
        return json.load(f)


@pytest.fixture
def gateways(seed):
    """Backend con los mismos datos que la semilla."""
    return {
        'customers': FakeGateway(Customer, copy.deepcopy(seed['customers'])),
        'products': FakeGateway(Product, copy.deepcopy(seed['products'])),
        'employees': FakeGateway(Employee, copy.deepcopy(seed['employees'])),
        'receipts': FakeGateway(Receipt, copy.deepcopy(seed['receipts'])),
        'services': FakeGateway(ServiceOrder, copy.deepcopy(seed['services'])),
    }


@pytest.fixture
def facade(gateways, seed):
    return DataFacade(
        gateways['customers'],
        gateways['products'],
        gateways['employees'],
        gateways['receipts'],
        gateways['services'],
        seed=seed,
        timeout=1.0,
    )


def set_failing(gateways, fail=True):
    for gateway in gateways.values():
        gateway.fail = fail
