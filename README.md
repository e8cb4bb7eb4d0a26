# userapi

A small HTTP service that manages users (an id, an e-mail address and a
password) stored in a PostgreSQL database. It serves one endpoint, `/users`,
as a WSGI application. Every other path answers `404 page not found`.

## Installing

```
pip install .
```

The package talks to PostgreSQL through SQLAlchemy but does not install a
database driver. Install the driver SQLAlchemy uses for `postgresql://` URLs
(psycopg2) yourself. Without it, every connection attempt fails.

To run the tests:

```
pip install ".[test]"
pytest
```

## Configuration

At start-up the service reads a `.env` file in the working directory. The
file must exist. Variables already set in the environment take precedence
over the file. Every variable below must be set and non-empty:

```
POSTGRES_HOST=localhost
POSTGRES_PORT=5432
POSTGRES_USER=user
POSTGRES_PASSWORD=password
POSTGRES_DB=user_api
PORT=8080
```

## Running

```
userapi
```

The command takes no options besides `--help`. It works through these steps:

1. It loads the configuration.
2. It connects to the database. It makes up to five attempts and waits two
   seconds after each failed one.
3. It applies pending migrations from `migrations/` (see below).
4. It serves on `0.0.0.0:$PORT` with Werkzeug's development server.

If it cannot start, it logs the reason and exits with status 1.

Log lines go to standard output in the form
`time=... level=... msg="..."`.

## Migrations

`userapi.db.run_migration(directory="migrations")` applies files named
`<version>_<name>.up.<ext>` in version order. It skips any file whose version
is not newer than the one recorded in the `schema_migrations` table. A missing
connection or a missing directory raises `userapi.db.DatabaseError`. Errors
that occur while a migration is being applied are logged rather than raised,
and the function returns the number of migrations it applied. Down
migrations are not supported.

## The `/users` endpoint

| Method   | Input                                              | Success                        |
|----------|----------------------------------------------------|--------------------------------|
| `GET`    | `?id=<id>`                                         | `200`, the user as JSON        |
| `POST`   | JSON body with `email` and `password`              | `200`, empty body              |
| `PUT`    | JSON body with `id` and any of `email`, `password` | `200`, updates non-empty fields |
| `DELETE` | `?id=<id>`                                         | `200`, empty body              |

The JSON form of a user is `{"id": ..., "email": ..., "password": ...}`.
Responses from `GET` include the stored password.

Error statuses:

- `400`: the id is missing, the body is not valid JSON or has fields of the
  wrong type, or a new user lacks an e-mail address or a password.
- `404`: the user does not exist (`GET`, `DELETE`).
- `405`: any other method.
- `500`: a database error occurred.

Example:

```
curl -X POST localhost:8080/users -d '{"email": "john@example.com", "password": "password"}'
curl 'localhost:8080/users?id=1'
```

## Using it as a library

```python
from userapi.app import create_app
from userapi.config import DBConfig
from userapi.db import connect

password = "password"
database = connect(DBConfig(host="localhost", port="5432", user="user",
                            password=password, db_name="user_api"))
application = create_app(database)
```

`application` is a WSGI callable, so any WSGI server can serve it.

Other parts of the package you can use directly:

- `userapi.repository.UserRepository` provides `get_user_by_id`, `save`,
  `update`, `delete` and `exists` on users. It works with any object whose
  `query(sql, *args)` method returns rows and takes `$1`-style placeholders.
- `userapi.db.Database` is that kind of object, backed by a SQLAlchemy
  engine.
- `userapi.handlers.UserHandler` is the endpoint on its own, as a WSGI
  callable.