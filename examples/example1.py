from functools import wraps
from typing import List, Optional
import asyncio

from firestore_snapshot import *
from firestore_snapshot.pydantic_compat import Field


def async_decorator(f):
    """Decorator to allow calling an async function like a sync function"""
    @wraps(f)
    def wrapper(*args, **kwargs):
        ret = asyncio.run(f(*args, **kwargs))

        return ret
    return wrapper


class User(SnapshotData, FieldNameReferable, HasTimestamps):
    class Settings:
        name = "users"  # Collection name

    name: str
    age: int = 0
    tags: List[str] = Field(default_factory=list)


class Post(SnapshotData, FieldNameReferable):
    class Settings:
        name = "posts"

    title: str
    author: Optional[Reference[User]] = None


@async_decorator
async def main():
    # 1. Database from GOOGLE_CLOUD_PROJECT / DATABASE / FIRESTORE_EMULATOR_HOST
    db = FirestoreDB.from_env()

    # 2. Register the models
    init_firestore_snapshot(db, [User, Post])

    # 3. Create a couple of users
    alice = Snapshot.at(User.collection_path(), User(name="Alice", age=30, tags=["admin"]), id="alice")
    await db.create(alice)
    await db.create(Snapshot.at(User.collection_path(), User(name="Bob", age=17)))

    # 4. Typed query
    query = QueryBuilder.from_path(User.collection_path()).where(User.age >= 18).order(User.name)
    for user in await db.get_all(query):
        print(f"{user.path}: {user.data} created at {user.create_time}")

    # 5. A post pointing at its author
    post = Snapshot.at(Post.collection_path(), Post(title="Hello", author=Reference.to(alice.path)))
    await db.create(post)
    author = await (await db.get(post.path)).reference_of(Post.author).load()
    print(f"{post.data.title} by {author.data.name}")

    # 6. Copy a user to a new location without touching the original
    copy = alice.replicated(DocumentPath("users/alice-archive", User))
    await db.set(copy)


main()
