"""
Database service layer for the catalog.
Maps each entity to a MongoDB collection and converts documents to models.
"""

from typing import Any, Dict, Iterable, List, Optional, Tuple, Type, TypeVar

import structlog
from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo import ASCENDING

from catalog.models import (
    Author, Book, BookInstance, BookInstanceListItem, BookInstanceStatus,
    BookListItem, CatalogCounts, CatalogDocument, Genre, to_object_id
)

logger = structlog.get_logger(__name__)

DocumentT = TypeVar("DocumentT", bound=CatalogDocument)

SortSpec = List[Tuple[str, int]]


class CatalogDatabaseService:
    """Database service for catalog operations."""

    def __init__(self, database: AsyncIOMotorDatabase):
        self.database = database
        self.authors_collection = database.authors
        self.genres_collection = database.genres
        self.books_collection = database.books
        self.bookinstances_collection = database.bookinstances

    async def ensure_indexes(self) -> None:
        """Create indexes used by sorting and dependent lookups."""
        try:
            await self.authors_collection.create_index([("family_name", ASCENDING), ("first_name", ASCENDING)])
            await self.genres_collection.create_index("name")
            await self.books_collection.create_index("title")
            await self.books_collection.create_index("author")
            await self.books_collection.create_index("genre")
            await self.bookinstances_collection.create_index("book")
            await self.bookinstances_collection.create_index("status")
            logger.info("Successfully created MongoDB indexes")
        except Exception as e:
            logger.error("Failed to create indexes", error=str(e))
            raise

    # Generic collection helpers

    async def _find_all(
        self,
        collection: AsyncIOMotorCollection,
        model: Type[DocumentT],
        query: Optional[Dict[str, Any]] = None,
        sort: Optional[SortSpec] = None
    ) -> List[DocumentT]:
        try:
            cursor = collection.find(query or {})
            if sort:
                cursor = cursor.sort(sort)
            documents = await cursor.to_list(length=None)
            return [model.from_document(document) for document in documents]
        except Exception as e:
            logger.error("Failed to list documents", collection=collection.name, query=str(query), error=str(e))
            raise

    async def _find_by_id(
        self,
        collection: AsyncIOMotorCollection,
        model: Type[DocumentT],
        document_id: str
    ) -> Optional[DocumentT]:
        object_id = to_object_id(document_id)
        if object_id is None:
            logger.debug("Malformed document id", collection=collection.name, document_id=document_id)
            return None
        try:
            document = await collection.find_one({"_id": object_id})
        except Exception as e:
            logger.error("Failed to get document by ID", collection=collection.name, document_id=document_id, error=str(e))
            raise
        if document is None:
            return None
        return model.from_document(document)

    async def _find_by_ids(
        self,
        collection: AsyncIOMotorCollection,
        model: Type[DocumentT],
        document_ids: Iterable[str],
        sort: Optional[SortSpec] = None
    ) -> List[DocumentT]:
        object_ids = [oid for oid in (to_object_id(i) for i in document_ids) if oid is not None]
        if not object_ids:
            return []
        return await self._find_all(collection, model, {"_id": {"$in": object_ids}}, sort)

    async def _insert(self, collection: AsyncIOMotorCollection, document: DocumentT) -> DocumentT:
        try:
            result = await collection.insert_one(document.to_document())
        except Exception as e:
            logger.error("Failed to insert document", collection=collection.name, error=str(e))
            raise
        created = document.copy(update={"id": str(result.inserted_id)})
        logger.info("Document created", collection=collection.name, document_id=created.id)
        return created

    async def _replace(
        self,
        collection: AsyncIOMotorCollection,
        document_id: str,
        document: DocumentT
    ) -> Optional[DocumentT]:
        """Overwrite every field of an existing document, keeping its id."""
        object_id = to_object_id(document_id)
        if object_id is None:
            return None
        try:
            result = await collection.replace_one({"_id": object_id}, document.to_document())
        except Exception as e:
            logger.error("Failed to update document", collection=collection.name, document_id=document_id, error=str(e))
            raise
        if result.matched_count == 0:
            logger.warning("Document not found for update", collection=collection.name, document_id=document_id)
            return None
        logger.info("Document updated", collection=collection.name, document_id=document_id)
        return document.copy(update={"id": str(object_id)})

    async def _delete(self, collection: AsyncIOMotorCollection, document_id: str) -> bool:
        object_id = to_object_id(document_id)
        if object_id is None:
            return False
        try:
            result = await collection.delete_one({"_id": object_id})
        except Exception as e:
            logger.error("Failed to delete document", collection=collection.name, document_id=document_id, error=str(e))
            raise
        if result.deleted_count == 0:
            logger.warning("Document not found for deletion", collection=collection.name, document_id=document_id)
            return False
        logger.info("Document deleted", collection=collection.name, document_id=document_id)
        return True

    def _reference_query(self, field: str, document_id: str) -> Optional[Dict[str, Any]]:
        object_id = to_object_id(document_id)
        if object_id is None:
            return None
        return {field: object_id}

    # Authors

    async def list_authors(self) -> List[Author]:
        return await self._find_all(
            self.authors_collection, Author, sort=[("family_name", ASCENDING), ("first_name", ASCENDING)]
        )

    async def get_author(self, author_id: str) -> Optional[Author]:
        return await self._find_by_id(self.authors_collection, Author, author_id)

    async def get_author_books(self, author_id: str) -> List[Book]:
        """Books written by an author, sorted by title."""
        query = self._reference_query("author", author_id)
        if query is None:
            return []
        return await self._find_all(self.books_collection, Book, query, [("title", ASCENDING)])

    async def create_author(self, author: Author) -> Author:
        return await self._insert(self.authors_collection, author)

    async def update_author(self, author_id: str, author: Author) -> Optional[Author]:
        return await self._replace(self.authors_collection, author_id, author)

    async def delete_author(self, author_id: str) -> bool:
        return await self._delete(self.authors_collection, author_id)

    # Genres

    async def list_genres(self) -> List[Genre]:
        return await self._find_all(self.genres_collection, Genre, sort=[("name", ASCENDING)])

    async def get_genre(self, genre_id: str) -> Optional[Genre]:
        return await self._find_by_id(self.genres_collection, Genre, genre_id)

    async def get_genres_by_ids(self, genre_ids: Iterable[str]) -> List[Genre]:
        return await self._find_by_ids(self.genres_collection, Genre, genre_ids, [("name", ASCENDING)])

    async def find_genre_by_name(self, name: str) -> Optional[Genre]:
        try:
            document = await self.genres_collection.find_one({"name": name})
        except Exception as e:
            logger.error("Failed to find genre by name", name=name, error=str(e))
            raise
        if document is None:
            return None
        return Genre.from_document(document)

    async def get_genre_books(self, genre_id: str) -> List[Book]:
        """Books tagged with a genre, sorted by title."""
        query = self._reference_query("genre", genre_id)
        if query is None:
            return []
        return await self._find_all(self.books_collection, Book, query, [("title", ASCENDING)])

    async def create_genre(self, genre: Genre) -> Genre:
        return await self._insert(self.genres_collection, genre)

    async def update_genre(self, genre_id: str, genre: Genre) -> Optional[Genre]:
        return await self._replace(self.genres_collection, genre_id, genre)

    async def delete_genre(self, genre_id: str) -> bool:
        return await self._delete(self.genres_collection, genre_id)

    # Books

    async def list_books(self) -> List[BookListItem]:
        """All books sorted by title, each with its author."""
        books = await self._find_all(self.books_collection, Book, sort=[("title", ASCENDING)])
        authors = await self._find_by_ids(self.authors_collection, Author, {book.author for book in books})
        authors_by_id = {author.id: author for author in authors}
        return [BookListItem(book=book, author=authors_by_id.get(book.author)) for book in books]

    async def list_book_titles(self) -> List[Book]:
        return await self._find_all(self.books_collection, Book, sort=[("title", ASCENDING)])

    async def get_book(self, book_id: str) -> Optional[Book]:
        return await self._find_by_id(self.books_collection, Book, book_id)

    async def get_book_instances(self, book_id: str) -> List[BookInstance]:
        """Copies of a book."""
        query = self._reference_query("book", book_id)
        if query is None:
            return []
        return await self._find_all(self.bookinstances_collection, BookInstance, query, [("imprint", ASCENDING)])

    async def create_book(self, book: Book) -> Book:
        return await self._insert(self.books_collection, book)

    async def update_book(self, book_id: str, book: Book) -> Optional[Book]:
        return await self._replace(self.books_collection, book_id, book)

    async def delete_book(self, book_id: str) -> bool:
        return await self._delete(self.books_collection, book_id)

    # Book instances

    async def list_book_instances(self) -> List[BookInstanceListItem]:
        """All copies with their book, sorted by book title then imprint."""
        instances = await self._find_all(self.bookinstances_collection, BookInstance)
        books = await self._find_by_ids(self.books_collection, Book, {instance.book for instance in instances})
        books_by_id = {book.id: book for book in books}
        items = [
            BookInstanceListItem(bookinstance=instance, book=books_by_id.get(instance.book))
            for instance in instances
        ]
        items.sort(key=lambda item: (item.book.title if item.book else "", item.bookinstance.imprint))
        return items

    async def get_book_instance(self, bookinstance_id: str) -> Optional[BookInstance]:
        return await self._find_by_id(self.bookinstances_collection, BookInstance, bookinstance_id)

    async def create_book_instance(self, bookinstance: BookInstance) -> BookInstance:
        return await self._insert(self.bookinstances_collection, bookinstance)

    async def update_book_instance(self, bookinstance_id: str, bookinstance: BookInstance) -> Optional[BookInstance]:
        return await self._replace(self.bookinstances_collection, bookinstance_id, bookinstance)

    async def delete_book_instance(self, bookinstance_id: str) -> bool:
        return await self._delete(self.bookinstances_collection, bookinstance_id)

    # Statistics

    async def get_counts(self) -> CatalogCounts:
        """Document counts for the home page."""
        try:
            return CatalogCounts(
                book_count=await self.books_collection.count_documents({}),
                book_instance_count=await self.bookinstances_collection.count_documents({}),
                book_instance_available_count=await self.bookinstances_collection.count_documents(
                    {"status": BookInstanceStatus.AVAILABLE.value}
                ),
                author_count=await self.authors_collection.count_documents({}),
                genre_count=await self.genres_collection.count_documents({}),
            )
        except Exception as e:
            logger.error("Failed to count documents", error=str(e))
            raise

    async def health_check(self) -> Dict:
        """
        Perform database health check.

        Returns:
            Dictionary with health status
        """
        try:
            await self.database.command("ping")
            return {"status": "healthy"}
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return {
                "status": "unhealthy",
                "error": str(e)
            }
