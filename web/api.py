"""
Document Search API

Flask blueprint for uploading, listing, deleting and searching documents.

Endpoints:
- POST   /documents            upload extracted text (JSON)
- POST   /documents/upload     upload a file (multipart, plain text extraction)
- GET    /documents            list documents
- GET    /documents/<id>       get one document
- DELETE /documents/<id>       delete a document
- GET    /search?q=...         search (also POST with {"query": ...})
- GET    /statistics           term statistics
- POST   /statistics/refresh   recompute term statistics

Usage:
    from web.api import api
    app.register_blueprint(api, url_prefix='/api')
"""

from flask import Blueprint, current_app, jsonify, request

from core.metrics import MetricsCollector, PhaseTimer
from search.models import DocumentMetadata, FileType, UploadRequest
from search.pipeline import SearchPipeline

from .error_handlers import (
    ConflictError, NotFoundError, UnsupportedFileTypeError,
    ValidationError, validate_request_json,
)
from .logging_config import AuditLogger, log_performance

api = Blueprint('api', __name__)

audit = AuditLogger()


def get_pipeline() -> SearchPipeline:
    """The pipeline owned by the current application."""
    return current_app.extensions['docsearch_pipeline']


def get_metrics() -> MetricsCollector:
    """The metrics collector owned by the current application."""
    return current_app.extensions['docsearch_metrics']


def _flag(name: str) -> bool:
    return request.args.get(name, '').lower() in ('1', 'true', 'yes')


def _parse_metadata(data) -> DocumentMetadata:
    try:
        return DocumentMetadata.from_dict(data)
    except (TypeError, ValueError):
        raise ValidationError('metadata.pages must be an integer')


# =============================================================================
# Documents
# =============================================================================

@api.route('/documents', methods=['POST'])
@validate_request_json('filename', 'fileType')
def upload_document():
    """
    Store a document from text produced by an external extractor.

    Body:
        filename: Original filename
        fileType: pdf, docx, csv, txt, xlsx or pptx
        extractedText: Plain text (may be empty)
        metadata: {title?, author?, pages?}
        id: Optional caller-supplied identifier
    """
    data = request.get_json()
    pipeline = get_pipeline()

    if FileType.parse(data.get('fileType')) is None:
        get_metrics().record_upload(False, error='unsupported_file_type')
        audit.log_rejected_upload(data.get('filename'), 'unsupported_file_type')
        raise UnsupportedFileTypeError(
            f"Unsupported file type: {data.get('fileType')}",
            supported=[t.value for t in FileType]
        )

    text = data.get('extractedText') or ''
    if not isinstance(text, str):
        raise ValidationError('extractedText must be a string')

    document_id = data.get('id')
    if document_id is not None:
        document_id = str(document_id)
    if document_id is not None and document_id in pipeline.store:
        raise ConflictError('Document already exists', document_id=document_id)

    upload_request = UploadRequest(
        filename=str(data['filename']),
        file_type=data['fileType'],
        extracted_text=text,
        metadata=_parse_metadata(data.get('metadata')),
        document_id=document_id,
    )

    with PhaseTimer() as timer:
        result = pipeline.upload(upload_request)

    get_metrics().record_upload(
        result.success,
        file_type=FileType.parse(upload_request.file_type).value,
        latency_ms=timer.elapsed_ms,
        error=None if result.success else 'rejected'
    )

    if not result.success:
        audit.log_rejected_upload(upload_request.filename, result.error)
        raise ValidationError(result.error)

    document = result.document
    audit.log_upload(document.id, document.filename, document.file_type.value,
                     document.size_bytes, document.searchable)
    return jsonify(result.to_dict()), 201


@api.route('/documents/upload', methods=['POST'])
def upload_file():
    """
    Store an uploaded file.

    Plain text files are decoded directly. Other formats are stored with a
    diagnostic placeholder until an extractor provides their text.

    Form fields:
        file: The uploaded file
        title, author, pages: Optional metadata
    """
    upload = request.files.get('file')
    if upload is None or not upload.filename:
        raise ValidationError('No file provided')

    if FileType.from_filename(upload.filename) is None:
        get_metrics().record_upload(False, error='unsupported_file_type')
        audit.log_rejected_upload(upload.filename, 'unsupported_file_type')
        raise UnsupportedFileTypeError(
            f'Unsupported file type: {upload.filename}',
            supported=[t.value for t in FileType]
        )

    metadata = _parse_metadata({
        'title': request.form.get('title'),
        'author': request.form.get('author'),
        'pages': request.form.get('pages') or None,
    })

    with PhaseTimer() as timer:
        result = get_pipeline().upload_file(upload.filename, upload.read(), metadata=metadata)

    file_type = FileType.from_filename(upload.filename).value
    get_metrics().record_upload(result.success, file_type=file_type, latency_ms=timer.elapsed_ms,
                                error=None if result.success else 'rejected')

    if not result.success:
        audit.log_rejected_upload(upload.filename, result.error)
        raise ValidationError(result.error)

    document = result.document
    audit.log_upload(document.id, document.filename, file_type,
                     document.size_bytes, document.searchable)
    return jsonify(result.to_dict()), 201


@api.route('/documents', methods=['GET'])
def list_documents():
    """List all documents in upload order."""
    documents = get_pipeline().list_documents()
    return jsonify({
        'documents': [d.to_dict() for d in documents],
        'total': len(documents)
    })


@api.route('/documents/<document_id>', methods=['GET'])
def get_document(document_id):
    """
    Get one document.

    Query params:
        include_vector: Include the embedding vector (true/false)
    """
    document = get_pipeline().get_document(document_id)
    if document is None:
        raise NotFoundError('Document not found', document_id=document_id)
    return jsonify(document.to_dict(include_vector=_flag('include_vector')))


@api.route('/documents/<document_id>', methods=['DELETE'])
def delete_document(document_id):
    """Delete a document."""
    if not get_pipeline().delete_document(document_id):
        raise NotFoundError('Document not found', document_id=document_id)

    get_metrics().record_delete()
    audit.log_delete(document_id)
    return jsonify({'success': True, 'id': document_id})


# =============================================================================
# Search
# =============================================================================

@api.route('/search', methods=['GET', 'POST'])
@log_performance('docsearch.search')
def search():
    """
    Hybrid semantic + keyword search.

    Query params (GET) or JSON body (POST):
        q / query: Search query
        limit: Maximum results (1..max_results)
        explain: Include token and concept expansion details
    """
    if request.method == 'POST':
        body = request.get_json(silent=True) or {}
        query = body.get('query', '')
        limit = body.get('limit')
        explain = bool(body.get('explain'))
    else:
        query = request.args.get('q', request.args.get('query', ''))
        limit = request.args.get('limit')
        explain = _flag('explain')

    if not isinstance(query, str):
        raise ValidationError('query must be a string')

    pipeline = get_pipeline()
    max_results = pipeline.config.max_results

    if limit is not None:
        try:
            limit = int(limit)
        except (TypeError, ValueError):
            raise ValidationError('limit must be an integer', param='limit')
        if not 1 <= limit <= max_results:
            raise ValidationError(f'limit must be between 1 and {max_results}', param='limit')

    with PhaseTimer() as timer:
        results = pipeline.search(query, limit=limit)

    get_metrics().record_search([r.search_type.value for r in results], timer.elapsed_ms)
    audit.log_search(query, len(results), int(timer.elapsed_ms))

    explanation = pipeline.explain_query(query)
    response = {
        'query': query,
        'results': [r.to_dict() for r in results],
        'total': len(results),
        'concepts': explanation['concepts'],
    }
    if explain:
        response['explain'] = explanation

    return jsonify(response)


# =============================================================================
# Statistics
# =============================================================================

@api.route('/statistics', methods=['GET'])
def statistics():
    """Collection and term statistics."""
    return jsonify(get_pipeline().statistics())


@api.route('/statistics/refresh', methods=['POST'])
def refresh_statistics():
    """Recompute document frequencies and IDF."""
    return jsonify(get_pipeline().refresh_statistics())
