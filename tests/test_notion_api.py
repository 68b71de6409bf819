"""Tests for the Notion REST client with a mocked HTTP session."""

import unittest
from unittest import mock

import requests

from notion_api import NotionClient


def response(status=200, payload=None, headers=None):
    resp = mock.MagicMock()
    resp.status_code = status
    resp.headers = headers or {}
    resp.json.return_value = payload if payload is not None else {}
    if status >= 400:
        resp.raise_for_status.side_effect = requests.exceptions.HTTPError(f"{status} error", response=resp)
    return resp


class TestNotionClient(unittest.TestCase):

    def setUp(self):
        self.client = NotionClient(token='secret_abc', base_url='https://api.notion.com/v1/')
        self.session = mock.MagicMock()
        self.client.session = self.session

    def test_requires_token(self):
        with self.assertRaises(ValueError):
            NotionClient(token='')

    def test_session_headers(self):
        client = NotionClient(token='secret_abc', notion_version='2022-06-28')
        self.assertEqual(client.session.headers['Authorization'], 'Bearer secret_abc')
        self.assertEqual(client.session.headers['Notion-Version'], '2022-06-28')

    def test_retrieve_page(self):
        self.session.request.return_value = response(payload={'id': 'p1', 'properties': {}})

        page = self.client.retrieve_page('p1')

        self.assertEqual(page['id'], 'p1')
        method, url = self.session.request.call_args[0]
        self.assertEqual(method, 'GET')
        self.assertEqual(url, 'https://api.notion.com/v1/pages/p1')

    def test_iter_block_children_follows_cursor(self):
        self.session.request.side_effect = [
            response(payload={'results': [{'id': '1'}, {'id': '2'}], 'has_more': True, 'next_cursor': 'c1'}),
            response(payload={'results': [{'id': '3'}], 'has_more': False, 'next_cursor': None}),
        ]

        ids = [b['id'] for b in self.client.iter_block_children('root')]

        self.assertEqual(ids, ['1', '2', '3'])
        first, second = self.session.request.call_args_list
        self.assertEqual(first[0][1], 'https://api.notion.com/v1/blocks/root/children')
        self.assertNotIn('start_cursor', first[1]['params'])
        self.assertEqual(second[1]['params']['start_cursor'], 'c1')
        self.assertEqual(second[1]['params']['page_size'], 100)

    @mock.patch('notion_api.time.sleep')
    def test_rate_limited_request_is_retried(self, sleep):
        self.session.request.side_effect = [
            response(status=429, headers={'Retry-After': '2'}),
            response(payload={'id': 'p1'}),
        ]

        page = self.client.retrieve_page('p1')

        self.assertEqual(page['id'], 'p1')
        sleep.assert_called_once_with(2.0)
        self.assertEqual(self.session.request.call_count, 2)

    @mock.patch('notion_api.time.sleep')
    def test_rate_limit_gives_up_after_max_retries(self, sleep):
        self.client.max_retries = 1
        self.session.request.side_effect = [
            response(status=429, headers={'Retry-After': '0'}),
            response(status=429, headers={'Retry-After': '0'}),
        ]

        with self.assertRaises(requests.exceptions.HTTPError):
            self.client.retrieve_page('p1')

    def test_http_error_is_reraised(self):
        self.session.request.return_value = response(status=404, payload={'code': 'object_not_found'})

        with self.assertRaises(requests.exceptions.HTTPError):
            self.client.retrieve_page('missing')

    def test_connection_error_is_reraised(self):
        self.session.request.side_effect = requests.exceptions.ConnectionError('offline')

        with self.assertRaises(requests.exceptions.ConnectionError):
            self.client.retrieve_page('p1')

    def test_from_config(self):
        client = NotionClient.from_config({
            'notion': {'token': 'secret_abc', 'base_url': 'https://proxy/v1', 'version': '2025-09-03'},
            'advanced': {'request_timeout': 5, 'max_retries': 1, 'rate_limit': 0.5},
        })

        self.assertEqual(client.base_url, 'https://proxy/v1')
        self.assertEqual(client.timeout, 5)
        self.assertEqual(client.max_retries, 1)
        self.assertEqual(client.rate_limit, 0.5)
        self.assertEqual(client.session.headers['Notion-Version'], '2025-09-03')


if __name__ == '__main__':
    unittest.main()
