"""
Example 01: One-to-Many and Many-to-Many

This example demonstrates attaching posts to their authors and categories
when the references are stored on the posts.
"""

from reverse_populate import MemoryCollection, reverse_populate_sync


def main():
    categories = [{"_id": 1, "name": "python"}, {"_id": 2, "name": "mongo"}]
    authors = [{"_id": 10, "name": "Ada"}, {"_id": 11, "name": "Grace"}]

    posts = MemoryCollection([
        {"title": "Indexes", "author": 10, "categories": [2]},
        {"title": "Generators", "author": 10, "categories": [1]},
        {"title": "Motor", "author": 11, "categories": [1, 2]},
    ])

    print("=== One-to-Many ===\n")

    # The author id lives on each post
    reverse_populate_sync(
        model_array=authors,
        store_where="posts",
        array_pop=True,
        collection=posts,
        id_field="author",
        sort="title",
    )
    for author in authors:
        titles = ", ".join(post["title"] for post in author["posts"])
        print(f"{author['name']}: {titles}")

    print("\n=== Many-to-Many ===\n")

    # Each post lists several category ids
    reverse_populate_sync(
        model_array=categories,
        store_where="posts",
        array_pop=True,
        collection=posts,
        id_field="categories",
        select="title",
    )
    for category in categories:
        titles = ", ".join(post["title"] for post in category["posts"])
        print(f"{category['name']}: {titles}")


if __name__ == "__main__":
    main()
