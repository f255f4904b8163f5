"""
Tests for the HTTP API

Tests the Flask app factory, document and search endpoints, health
probes and JSON error responses.
"""

import io

import pytest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from core.metrics import MetricsCollector
from search.pipeline import SearchPipeline
from web.app import create_app


@pytest.fixture
def app():
    app = create_app(pipeline=SearchPipeline(), metrics=MetricsCollector())
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def upload(client, **overrides):
    payload = {
        'filename': 'notes.txt',
        'fileType': 'txt',
        'extractedText': 'I love fresh apples and bananas',
    }
    payload.update(overrides)
    return client.post('/api/documents', json=payload)


class TestDocumentEndpoints:
    """Tests for /api/documents."""

    def test_upload(self, client):
        """Test uploading extracted text."""
        response = upload(client, metadata={'title': 'Notes', 'pages': 1})

        assert response.status_code == 201
        data = response.get_json()
        assert data['success'] is True
        assert data['document']['filename'] == 'notes.txt'
        assert data['document']['fileType'] == 'txt'
        assert data['document']['keywords'] == ['love', 'fresh', 'apples', 'bananas']
        assert data['document']['metadata'] == {'title': 'Notes', 'author': None, 'pages': 1}
        assert data['document']['searchable'] is True

    def test_upload_unsupported_type(self, client, app):
        """Test unsupported file types are rejected with 400."""
        response = upload(client, filename='image.png', fileType='png')

        assert response.status_code == 400
        data = response.get_json()
        assert data['error'] == 'unsupported_file_type'
        assert 'txt' in data['details']['supported']
        assert len(app.extensions['docsearch_pipeline'].store) == 0

    def test_upload_missing_fields(self, client):
        """Test required fields are checked."""
        response = client.post('/api/documents', json={'filename': 'a.txt'})
        assert response.status_code == 400
        data = response.get_json()
        assert data['error'] == 'validation_error'
        assert data['details']['missing_fields'] == ['fileType']

    def test_upload_not_json(self, client):
        """Test a non-JSON body is rejected."""
        response = client.post('/api/documents', data='plain', content_type='text/plain')
        assert response.status_code == 400

    def test_upload_bad_pages(self, client):
        """Test non-numeric page counts are rejected."""
        response = upload(client, metadata={'pages': 'many'})
        assert response.status_code == 400

    def test_upload_duplicate_id(self, client):
        """Test duplicate ids conflict."""
        assert upload(client, id='doc-1').status_code == 201
        response = upload(client, id='doc-1')
        assert response.status_code == 409
        assert response.get_json()['error'] == 'conflict'

    def test_upload_empty_text(self, client):
        """Test empty documents are stored but not searchable."""
        response = upload(client, extractedText='', filename='blank.txt')
        assert response.status_code == 201
        assert response.get_json()['document']['searchable'] is False

    def test_upload_file(self, client):
        """Test multipart upload of a text file."""
        response = client.post(
            '/api/documents/upload',
            data={'file': (io.BytesIO(b'Fresh apples for sale.'), 'market.txt'), 'author': 'Kim'},
            content_type='multipart/form-data',
        )

        assert response.status_code == 201
        document = response.get_json()['document']
        assert document['extractedText'] == 'Fresh apples for sale.'
        assert document['metadata']['title'] == 'market'
        assert document['metadata']['author'] == 'Kim'

    def test_upload_file_binary_format(self, client):
        """Test binary formats are stored with a placeholder."""
        response = client.post(
            '/api/documents/upload',
            data={'file': (io.BytesIO(b'%PDF-1.4'), 'report.pdf')},
            content_type='multipart/form-data',
        )

        assert response.status_code == 201
        document = response.get_json()['document']
        assert document['searchable'] is False
        assert document['extractionError'] == 'No extractor available for PDF files'

    def test_upload_file_missing(self, client):
        """Test multipart upload without a file."""
        response = client.post('/api/documents/upload', data={}, content_type='multipart/form-data')
        assert response.status_code == 400

    def test_upload_file_unsupported(self, client):
        """Test multipart upload of an unsupported extension."""
        response = client.post(
            '/api/documents/upload',
            data={'file': (io.BytesIO(b'GIF89a'), 'cat.gif')},
            content_type='multipart/form-data',
        )
        assert response.status_code == 400
        assert response.get_json()['error'] == 'unsupported_file_type'

    def test_list_documents(self, client):
        """Test listing in upload order."""
        upload(client, filename='a.txt')
        upload(client, filename='b.txt')

        data = client.get('/api/documents').get_json()
        assert data['total'] == 2
        assert [d['filename'] for d in data['documents']] == ['a.txt', 'b.txt']
        assert 'vector' not in data['documents'][0]

    def test_get_document(self, client):
        """Test fetching one document with its vector."""
        upload(client, id='doc-1')

        response = client.get('/api/documents/doc-1?include_vector=true')
        assert response.status_code == 200
        assert len(response.get_json()['vector']) == 100

    def test_get_missing_document(self, client):
        """Test 404 for unknown ids."""
        response = client.get('/api/documents/nope')
        assert response.status_code == 404
        assert response.get_json()['error'] == 'not_found'

    def test_delete_document(self, client):
        """Test deleting a document."""
        upload(client, id='doc-1')

        response = client.delete('/api/documents/doc-1')
        assert response.status_code == 200
        assert response.get_json() == {'success': True, 'id': 'doc-1'}
        assert client.get('/api/documents/doc-1').status_code == 404
        assert client.delete('/api/documents/doc-1').status_code == 404


class TestSearchEndpoint:
    """Tests for /api/search."""

    @pytest.fixture
    def loaded(self, client):
        upload(client, id='fruit', extractedText='I love fresh apples and bananas')
        upload(client, id='report', filename='Quarterly_Report.pdf', fileType='pdf',
               extractedText='revenue is up')
        return client

    def test_concept_search(self, loaded):
        """Test a concept query over HTTP."""
        data = loaded.get('/api/search?q=fruit').get_json()

        assert data['query'] == 'fruit'
        assert data['total'] >= 1
        assert data['results'][0]['documentId'] == 'fruit'
        assert data['results'][0]['searchType'] in ('semantic', 'hybrid')
        assert 'fruit' in data['concepts']

    def test_keyword_search(self, loaded):
        """Test a filename match over HTTP."""
        data = loaded.get('/api/search?q=Quarterly').get_json()

        assert data['results'][0]['documentId'] == 'report'
        assert data['results'][0]['searchType'] == 'keyword'
        assert data['results'][0]['score'] == pytest.approx(0.3)

    def test_post_search(self, loaded):
        """Test searching with a JSON body."""
        response = loaded.post('/api/search', json={'query': 'apples', 'limit': 1, 'explain': True})
        data = response.get_json()

        assert response.status_code == 200
        assert data['total'] == 1
        assert data['results'][0]['matchedSections'][0]['text'] == 'I love fresh apples and bananas'
        assert data['explain']['tokens'] == ['apples']

    def test_empty_query(self, loaded):
        """Test an empty query returns no results."""
        data = loaded.get('/api/search?q=').get_json()
        assert data['results'] == []
        assert data['total'] == 0

    @pytest.mark.parametrize('limit', ['0', '11', 'ten'])
    def test_invalid_limit(self, loaded, limit):
        """Test limit validation."""
        response = loaded.get(f'/api/search?q=fruit&limit={limit}')
        assert response.status_code == 400

    def test_search_recorded_in_metrics(self, loaded, app):
        """Test searches are counted."""
        loaded.get('/api/search?q=fruit')
        summary = app.extensions['docsearch_metrics'].get_summary()
        assert summary['searches']['total'] == 1
        assert summary['uploads']['accepted'] == 2


class TestStatisticsEndpoints:
    """Tests for /api/statistics."""

    def test_statistics(self, client):
        """Test statistics after uploads."""
        upload(client)
        data = client.get('/api/statistics').get_json()

        assert data['documents'] == 1
        assert data['total_documents'] == 1
        assert data['vocabulary_size'] > 0

    def test_refresh(self, client):
        """Test refreshing statistics after a delete."""
        upload(client, id='a')
        upload(client, id='b')
        client.delete('/api/documents/b')

        data = client.post('/api/statistics/refresh').get_json()
        assert data['total_documents'] == 1


class TestHealthEndpoints:
    """Tests for health probes and metrics."""

    def test_liveness(self, client):
        """Test /health."""
        response = client.get('/health')
        assert response.status_code == 200
        assert response.get_json()['status'] == 'ok'

    def test_readiness(self, client):
        """Test /ready with an empty collection."""
        response = client.get('/ready')
        assert response.status_code == 200
        assert response.get_json()['status'] == 'ready'

    def test_detailed(self, client):
        """Test the diagnostic report."""
        data = client.get('/health/detailed').get_json()
        assert data['checks']['store']['documents'] == 0
        assert data['checks']['encoder']['dimension'] == 100
        assert data['checks']['dependencies']['numpy']['status'] == 'ok'

    def test_metrics(self, client):
        """Test the metrics endpoint."""
        upload(client)
        data = client.get('/metrics').get_json()
        assert data['docsearch_documents_total'] == 1
        assert data['collector']['uploads']['accepted'] == 1


class TestErrorHandling:
    """Tests for JSON error responses and request ids."""

    def test_unknown_route(self, client):
        """Test unknown routes return JSON 404."""
        response = client.get('/api/unknown')
        assert response.status_code == 404
        assert response.get_json()['error'] == 'not_found'

    def test_method_not_allowed(self, client):
        """Test wrong methods return JSON 405."""
        response = client.put('/api/search')
        assert response.status_code == 405
        assert response.get_json()['error'] == 'method_not_allowed'

    def test_payload_too_large(self, app, client):
        """Test uploads over MAX_CONTENT_LENGTH return JSON 413."""
        app.config['MAX_CONTENT_LENGTH'] = 64
        response = upload(client, extractedText='apples ' * 100)

        assert response.status_code == 413
        data = response.get_json()
        assert data['error'] == 'payload_too_large'
        assert data['details']['max_bytes'] == 64

    def test_request_id_echoed(self, client):
        """Test X-Request-ID is propagated."""
        response = client.get('/health', headers={'X-Request-ID': 'abc-123'})
        assert response.headers['X-Request-ID'] == 'abc-123'

    def test_request_id_generated(self, client):
        """Test a request id is generated when missing."""
        response = client.get('/health')
        assert response.headers.get('X-Request-ID')

    def test_apps_are_isolated(self):
        """Test each app owns its own pipeline."""
        first = create_app().test_client()
        second = create_app().test_client()
        upload(first)
        assert second.get('/api/documents').get_json()['total'] == 0
