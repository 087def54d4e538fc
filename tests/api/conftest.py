import httpx
import pytest

from reqres.api.users import Client

@pytest.fixture
def base_url():
    return 'https://reqres.test/api/users'

@pytest.fixture
def page_1_body():
    return {
        'page': 1,
        'per_page': 2,
        'total': 2,
        'total_pages': 1,
        'data': [
            {
                'id': 1,
                'email': 'george.bluth@reqres.in',
                'first_name': 'George',
                'last_name': 'Bluth',
                'avatar': 'https://reqres.in/img/faces/1-image.jpg',
            },
            {
                'id': 2,
                'email': 'janet.weaver@reqres.in',
                'first_name': 'Janet',
                'last_name': 'Weaver',
                'avatar': 'https://reqres.in/img/faces/2-image.jpg',
            },
        ],
        'support': {
            'url': 'https://reqres.in/#support-heading',
            'text': 'To keep ReqRes free, contributions towards server costs are appreciated!',
        },
    }

@pytest.fixture
def empty_page_body():
    return {
        'page': 2,
        'per_page': 2,
        'total': 2,
        'total_pages': 1,
        'data': [],
    }

@pytest.fixture
def client_for(base_url):
    '''Returns a function that makes a Client whose requests are answered by ``handler``.'''
    clients = []
    def make_client(handler, base_url=base_url):
        client = Client(base_url=base_url, transport=httpx.MockTransport(handler))
        clients.append(client)
        return client
    yield make_client
    for client in clients:
        client.httpx_client.close()
