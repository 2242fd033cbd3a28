"""
Ziora - Test Configuration and Fixtures
"""
import os
import copy
from datetime import datetime, timezone
from typing import AsyncGenerator
import pytest
from bson import ObjectId
from httpx import AsyncClient, ASGITransport

# Set testing environment
os.environ['MONGODB_URL'] = 'mongodb://localhost:27017'
os.environ['DATABASE_NAME'] = 'ziora_test'

from ziora.main import app
from ziora.api.deps import get_db
from ziora.core.config import settings

NOW = datetime(2025, 6, 25, 0, 0, 0, tzinfo=timezone.utc)

CONTENT_DOCUMENT_ID = ObjectId('65f000000000000000000001')


def make_comment(comment_id, timestamp=None, replies=None, **fields):
    comment = {
        'id': comment_id,
        'author': f'Student {comment_id}',
        'content': f'Comment {comment_id}',
        'timestamp': timestamp,
        'likes': 0,
        'dislikes': 0,
        'likedBy': [],
        'dislikedBy': [],
        'replies': replies or [],
        'status': 'pending',
    }
    comment.update(fields)
    return comment


def build_content_document():
    """
    Content document used across tests.

    SE/sem-3/computer-engineering/dbms notes module 0 holds the thread
    n1 -> [n1-r0, n1-r1 -> [c1, n1-r1-r1]] and n2; video topic "Joins"
    holds v1 -> [v1-r0]; TE/sem-5/it/cn holds t1.
    """
    return {
        '_id': CONTENT_DOCUMENT_ID,
        'SE': {
            'sem-3': {
                'computer-engineering': {
                    'dbms': {
                        'notes': {
                            'modules': [
                                {
                                    'id': 'mod-1',
                                    'name': 'Introduction',
                                    'comments': [
                                        make_comment('n1', '22/06/2025, 00:46:48', replies=[
                                            make_comment('n1-r0', '2025-06-22T01:00:00Z'),
                                            make_comment('n1-r1', '6/22/2025, 2:15:00 PM', replies=[
                                                make_comment('c1', '2025-06-23T08:00:00'),
                                                make_comment('n1-r1-r1', datetime(2025, 6, 23, 9, 0)),
                                            ]),
                                        ]),
                                        make_comment('n2', 'not a date', likes={'$numberInt': '4'}),
                                    ],
                                },
                                {'id': 'mod-2', 'name': 'ER Model', 'comments': []},
                            ]
                        },
                        'video-lecs': {
                            'modules': [
                                {
                                    'id': 'vmod-1',
                                    'name': 'SQL',
                                    'topics': [
                                        {
                                            'id': 'topic-1',
                                            'title': 'Joins',
                                            'comments': [
                                                make_comment('v1', {'$date': '2025-06-24T10:00:00Z'}, replies=[
                                                    make_comment('v1-r0', '24/06/2025, 11:30:00'),
                                                ]),
                                            ],
                                        }
                                    ],
                                }
                            ]
                        },
                        'pyq': {'papers': []},
                    }
                }
            }
        },
        'TE': {
            'sem-5': {
                'information-technology': {
                    'computer-networks': {
                        'notes': {
                            'modules': [
                                {'id': 'mod-9', 'name': 'Layers', 'comments': [
                                    make_comment('t1', '2025-05-01T00:00:00Z', author=None),
                                ]},
                            ]
                        }
                    }
                }
            }
        },
        'updatedAt': datetime(2025, 6, 24, 12, 0),
    }


def _resolve(document, path, create=False):
    parts = path.split('.')
    node = document
    for part in parts[:-1]:
        if isinstance(node, list):
            node = node[int(part)]
        elif create:
            node = node.setdefault(part, {})
        else:
            node = node[part]
    last = parts[-1]
    return node, int(last) if isinstance(node, list) else last


def get_path(document, path):
    container, key = _resolve(document, path)
    return container[key]


def _values_at(node, parts):
    """Values under a dotted path, fanning out over arrays like a MongoDB filter"""
    if not parts:
        return [node]
    if isinstance(node, list):
        return [value for item in node for value in _values_at(item, parts)]
    if not isinstance(node, dict) or parts[0] not in node:
        return []
    return _values_at(node[parts[0]], parts[1:])


def _expand(node, parts, filters):
    """Concrete paths for a path using $[] and $[name] array operators"""
    if len(parts) == 1:
        return [parts]
    part, rest = parts[0], parts[1:]
    if part == '$[]' or part.startswith('$['):
        if not isinstance(node, list):
            return []
        name = part[2:-1]
        condition = {k[len(name) + 1:]: v for k, v in filters.items() if k.startswith(f'{name}.')}
        return [
            [str(index)] + path
            for index, item in enumerate(node)
            if not name or all(isinstance(item, dict) and item.get(k) == v for k, v in condition.items())
            for path in _expand(item, rest, filters)
        ]
    try:
        child = node[int(part)] if isinstance(node, list) else node[part]
    except (KeyError, IndexError, TypeError, ValueError):
        return []
    return [[part] + path for path in _expand(child, rest, filters)]


def apply_update(document, update, array_filters=None):
    """Apply $set / $pull / $push with dotted paths; True if anything changed"""
    filters = {k: v for condition in array_filters or [] for k, v in condition.items()}
    changed = False
    for path, value in update.get('$set', {}).items():
        container, key = _resolve(document, path, create=True)
        container[key] = value
        changed = True
    for path, condition in update.get('$pull', {}).items():
        container, key = _resolve(document, path)
        items = container.get(key, []) if isinstance(container, dict) else container[key]
        if isinstance(condition, dict):
            kept = [
                item for item in items
                if not all(isinstance(item, dict) and item.get(k) == v for k, v in condition.items())
            ]
        else:
            kept = [item for item in items if item != condition]
        if len(kept) != len(items):
            container[key] = kept
            changed = True
    for path, value in update.get('$push', {}).items():
        for concrete in _expand(document, path.split('.'), filters):
            container, key = _resolve(document, '.'.join(concrete))
            container[key].append(value)
            changed = True
    return changed


def _project(document, projection):
    projected = {'_id': document.get('_id')}
    for path in projection:
        try:
            value = get_path(document, path)
        except (KeyError, IndexError, TypeError, ValueError):
            continue
        node = projected
        parts = path.split('.')
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        node[parts[-1]] = value
    return copy.deepcopy(projected)


class FakeResult:
    def __init__(self, matched_count=0, modified_count=0, acknowledged=True, inserted_id=None):
        self.matched_count = matched_count
        self.modified_count = modified_count
        self.acknowledged = acknowledged
        self.inserted_id = inserted_id


class FakeCursor:
    def __init__(self, documents):
        self.documents = documents

    def sort(self, *args, **kwargs):
        return self

    def limit(self, count):
        self.documents = self.documents[:count]
        return self

    async def to_list(self, length=None):
        return copy.deepcopy(self.documents if length is None else self.documents[:length])


class FakeCollection:
    """
    Just enough of a Motor collection for the comment store.

    Updates filtered by ``_id`` or carrying ``array_filters`` are applied to
    the stored documents; any other update is only matched and recorded.
    """

    def __init__(self, documents=None):
        self.documents = list(documents or [])
        self.queries = []
        self.updates = []
        self.inserted = []
        self.deleted = []
        self.find_calls = 0

    def _matches(self, document, query):
        if '$or' in query:
            return any(self._matches(document, part) for part in query['$or'])
        for key, expected in query.items():
            if key == '_id':
                if document.get('_id') != expected:
                    return False
            elif key == 'replies.id':
                if not any(reply.get('id') == expected for reply in document.get('replies', [])):
                    return False
            elif '.' in key and not isinstance(expected, dict):
                if expected not in _values_at(document, key.split('.')):
                    return False
            elif isinstance(expected, dict) and '$exists' in expected:
                try:
                    get_path(document, key)
                except (KeyError, IndexError, TypeError, ValueError):
                    return False
            elif document.get(key) != expected:
                return False
        return True

    def find(self, query=None, *args, **kwargs):
        self.find_calls += 1
        self.queries.append(query)
        return FakeCursor([doc for doc in self.documents if self._matches(doc, query or {})])

    async def find_one(self, query=None, projection=None, **kwargs):
        self.queries.append(query)
        for document in self.documents:
            if self._matches(document, query or {}):
                if projection:
                    return _project(document, projection)
                return copy.deepcopy(document)
        return None

    async def insert_one(self, document):
        document['_id'] = document.get('_id') or ObjectId()
        self.inserted.append(document)
        self.documents.append(copy.deepcopy(document))
        return FakeResult(acknowledged=True, inserted_id=document['_id'])

    async def update_one(self, query, update, **kwargs):
        self.updates.append((query, update, kwargs))
        if '_id' not in query:
            matched = [doc for doc in self.documents if self._matches(doc, query)]
            if not matched:
                return FakeResult()
            if kwargs.get('array_filters'):
                changed = apply_update(matched[0], update, kwargs['array_filters'])
                return FakeResult(matched_count=1, modified_count=1 if changed else 0)
            return FakeResult(matched_count=1, modified_count=1)
        for document in self.documents:
            if document.get('_id') == query['_id']:
                changed = apply_update(document, update)
                return FakeResult(matched_count=1, modified_count=1 if changed else 0)
        return FakeResult()

    async def delete_one(self, query):
        self.deleted.append(query)
        before = len(self.documents)
        self.documents = [doc for doc in self.documents if not self._matches(doc, query)]
        return FakeResult(modified_count=before - len(self.documents))


class FakeDatabase(dict):
    def __missing__(self, name):
        collection = FakeCollection()
        self[name] = collection
        return collection


@pytest.fixture
def content_document():
    return build_content_document()


@pytest.fixture
def fake_db(content_document) -> FakeDatabase:
    """Database with one content document and an empty comments collection"""
    database = FakeDatabase()
    database[settings.CONTENT_COLLECTION] = FakeCollection([content_document])
    database[settings.COMMENTS_COLLECTION] = FakeCollection()
    return database


@pytest.fixture
def stored_document(fake_db):
    """The content document as currently stored"""
    return fake_db[settings.CONTENT_COLLECTION].documents[0]


@pytest.fixture
async def client(fake_db) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        return fake_db

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()
