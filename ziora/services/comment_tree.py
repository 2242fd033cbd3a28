"""
Traversal of the comment threads nested inside academic content documents

ziora/services/comment_tree.py

A content document is keyed year -> semester -> branch -> subject, and
every subject may hold ``notes`` modules (each with a ``comments`` list)
and ``video-lecs`` modules (each with topics that own a ``comments`` list).
Replies nest under ``replies`` to any depth. Walks here use explicit stacks
so deep reply chains never hit the recursion limit.
"""
from typing import Any, Dict, Iterator, List, NamedTuple, Optional

from ziora.models.base import ContentType, CommentType, YearLevel

YEAR_KEYS = tuple(level.value for level in YearLevel)


class CommentThread(NamedTuple):
    """A module or topic comment list and where it lives"""
    document_id: Any
    year: str
    semester: str
    branch: str
    subject: str
    content_type: str
    module: Dict[str, Any]
    module_index: int
    topic: Optional[Dict[str, Any]]
    topic_index: Optional[int]
    comments: List[Dict[str, Any]]
    field_path: str

    @property
    def comment_type(self) -> str:
        if self.content_type == ContentType.VIDEO_LECTURES.value:
            return CommentType.VIDEOS.value
        return CommentType.NOTES.value

    @property
    def content_id(self) -> Optional[str]:
        owner = self.topic if self.topic is not None else self.module
        return owner.get("id")

    @property
    def listing_path(self) -> str:
        return "/".join([
            self.year, self.semester, self.branch, self.subject, self.content_type, "modules"
        ])


class CommentLocation(NamedTuple):
    """Where a comment or reply sits inside a content document"""
    thread: CommentThread
    comment_index: int
    reply_path: Optional[str]
    node: Dict[str, Any]

    @property
    def document_id(self) -> Any:
        return self.thread.document_id

    @property
    def path(self) -> str:
        """Dotted field path of the node itself"""
        base = f"{self.thread.field_path}.{self.comment_index}"
        if self.reply_path is None:
            return base
        return f"{base}.replies.{self.reply_path}"

    @property
    def array_path(self) -> str:
        """Dotted field path of the array holding the node"""
        return self.path.rsplit(".", 1)[0]

    @property
    def depth(self) -> int:
        """0 for a top-level comment, 1 for a direct reply, ..."""
        if self.reply_path is None:
            return 0
        return self.reply_path.count("replies") + 1

    @property
    def is_reply(self) -> bool:
        return self.reply_path is not None


def _children(node: Any) -> List[Dict[str, Any]]:
    if not isinstance(node, dict):
        return []
    items = node.get("replies")
    return items if isinstance(items, list) else []


def _same_id(node: Any, comment_id: str) -> bool:
    return isinstance(node, dict) and node.get("id") is not None and str(node.get("id")) == comment_id


def iter_comment_threads(document: Dict[str, Any]) -> Iterator[CommentThread]:
    """Yield every module/topic comment list of a content document in document order"""
    document_id = document.get("_id")

    for year_key, year in document.items():
        if year_key not in YEAR_KEYS or not isinstance(year, dict):
            continue
        for semester_key, semester in year.items():
            if not semester_key.startswith("sem-") or not isinstance(semester, dict):
                continue
            for branch_key, branch in semester.items():
                if not isinstance(branch, dict):
                    continue
                for subject_key, subject in branch.items():
                    if not isinstance(subject, dict):
                        continue
                    prefix = f"{year_key}.{semester_key}.{branch_key}.{subject_key}"
                    context = (document_id, year_key, semester_key, branch_key, subject_key)

                    notes = subject.get(ContentType.NOTES.value)
                    modules = notes.get("modules") if isinstance(notes, dict) else None
                    for module_index, module in enumerate(modules or []):
                        if not isinstance(module, dict) or not isinstance(module.get("comments"), list):
                            continue
                        yield CommentThread(
                            *context, ContentType.NOTES.value, module, module_index, None, None,
                            module["comments"],
                            f"{prefix}.notes.modules.{module_index}.comments",
                        )

                    videos = subject.get(ContentType.VIDEO_LECTURES.value)
                    modules = videos.get("modules") if isinstance(videos, dict) else None
                    for module_index, module in enumerate(modules or []):
                        if not isinstance(module, dict):
                            continue
                        for topic_index, topic in enumerate(module.get("topics") or []):
                            if not isinstance(topic, dict) or not isinstance(topic.get("comments"), list):
                                continue
                            yield CommentThread(
                                *context, ContentType.VIDEO_LECTURES.value, module, module_index,
                                topic, topic_index, topic["comments"],
                                f"{prefix}.video-lecs.modules.{module_index}"
                                f".topics.{topic_index}.comments",
                            )


def find_reply_index_path(replies: List[Dict[str, Any]], comment_id: str) -> Optional[str]:
    """
    Search a reply tree for ``comment_id`` in pre-order.

    Returns the dotted index path relative to ``replies``, e.g.
    ``"0.replies.2.replies.1"``, or None.
    """
    stack = [(str(index), reply) for index, reply in enumerate(replies or [])]
    stack.reverse()

    while stack:
        path, reply = stack.pop()
        if _same_id(reply, comment_id):
            return path
        children = _children(reply)
        for index in range(len(children) - 1, -1, -1):
            stack.append((f"{path}.replies.{index}", children[index]))

    return None


def resolve_reply(comment: Dict[str, Any], reply_path: str) -> Dict[str, Any]:
    """Follow a relative reply path from a top-level comment"""
    node = comment
    for index in reply_path.split(".replies."):
        node = _children(node)[int(index)]
    return node


def locate_in_document(document: Dict[str, Any], comment_id: str) -> Optional[CommentLocation]:
    """First comment or reply with ``comment_id`` in document order"""
    comment_id = str(comment_id)

    for thread in iter_comment_threads(document):
        for comment_index, comment in enumerate(thread.comments):
            if _same_id(comment, comment_id):
                return CommentLocation(thread, comment_index, None, comment)

            reply_path = find_reply_index_path(_children(comment), comment_id)
            if reply_path is not None:
                return CommentLocation(
                    thread, comment_index, reply_path, resolve_reply(comment, reply_path)
                )

    return None


def locate_in_documents(documents: List[Dict[str, Any]], comment_id: str) -> Optional[CommentLocation]:
    for document in documents:
        location = locate_in_document(document, comment_id)
        if location is not None:
            return location
    return None


def _with_context(node: Dict[str, Any], thread: CommentThread, parent_id: Optional[str]) -> Dict[str, Any]:
    record = {
        **node,
        "year": thread.year,
        "semester": thread.semester,
        "branch": thread.branch,
        "subject": thread.subject,
        "module": thread.module.get("name"),
        "type": thread.comment_type,
        "contentId": thread.content_id,
        "path": thread.listing_path,
    }
    if thread.topic is not None:
        record["topic"] = thread.topic.get("title")
    if parent_id is not None:
        record["parentId"] = parent_id
    return record


def flatten_document(document: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Every comment and reply of a document as standalone records.

    Records come out in pre-order (a comment, then its replies depth first)
    and carry the structural context of their thread. Replies also carry
    ``parentId``.
    """
    flattened = []

    for thread in iter_comment_threads(document):
        for comment in thread.comments:
            if not isinstance(comment, dict):
                continue
            flattened.append(_with_context(comment, thread, None))

            stack = [(reply, comment.get("id")) for reply in reversed(_children(comment))]
            while stack:
                reply, parent_id = stack.pop()
                if not isinstance(reply, dict):
                    continue
                flattened.append(_with_context(reply, thread, parent_id))
                stack.extend((child, reply.get("id")) for child in reversed(_children(reply)))

    return flattened


def flatten_documents(documents: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    flattened = []
    for document in documents:
        flattened.extend(flatten_document(document))
    return flattened
