"""
Config documents: filesystem store, git-coupled workflow, routes and diff.
"""
from documents.store import ConfigStore, validate_document_name, validate_json_content
from documents.service import DocumentService, MutationOutcome, repository_web_url
from documents.diff import DiffLine, diff_lines

__all__ = [
    'ConfigStore',
    'validate_document_name',
    'validate_json_content',
    'DocumentService',
    'MutationOutcome',
    'repository_web_url',
    'DiffLine',
    'diff_lines',
]
