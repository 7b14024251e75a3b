"""
Example 02: Async with Motor

This example demonstrates a one-to-one reverse populate against a live
MongoDB through motor. Set MONGODB_URI before running.
"""

import asyncio
import os

from motor.motor_asyncio import AsyncIOMotorClient

from reverse_populate import AsyncMongoCollection, reverse_populate


async def main():
    client = AsyncIOMotorClient(os.environ.get("MONGODB_URI", "mongodb://localhost:27017"))
    db = client["reverse_populate_example"]

    await db.people.delete_many({})
    await db.passports.delete_many({})

    people = await db.people.insert_many([{"name": "Grace"}, {"name": "Alan"}])
    await db.passports.insert_many([
        {"number": "P-1", "owner": people.inserted_ids[0]},
        {"number": "P-2", "owner": people.inserted_ids[1]},
    ])

    print("=== One-to-One ===\n")

    persons = await db.people.find({}).to_list(length=None)
    await reverse_populate(
        model_array=persons,
        store_where="passport",
        array_pop=False,
        collection=AsyncMongoCollection(
            db.passports,
            references={"owner": AsyncMongoCollection(db.people)},
        ),
        id_field="owner",
        populate=[{"path": "owner", "select": "name"}],
    )

    for person in persons:
        passport = person["passport"]
        print(f"{person['name']}: passport {passport['number']} (owner {passport['owner']['name']})")

    await client.drop_database("reverse_populate_example")
    client.close()


if __name__ == "__main__":
    asyncio.run(main())
