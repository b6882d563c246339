# fgacli

A library for working with relationship-based authorization stores. It reads
relationship tuples from JSON, YAML and CSV files, parses contextual tuples
and conditions, loads authorization models written as JSON, describes and runs
store tests through a client you supply, and formats results as JSON, YAML or
CSV.

## Reading tuple files

`fgacli.tuplefile.read_tuple_file` picks the parser from the file extension
(`.json`, `.yaml`, `.yml` or `.csv`) and returns a list of
`fgacli.tuples.TupleKey` objects. Any failure to read or parse the file is
raised as `TupleFileError`.

```python
from fgacli.tuplefile import read_tuple_file, TupleFileError

try:
    tuples = read_tuple_file("tuples.csv")
except TupleFileError as err:
    print(err)
else:
    for key in tuples:
        print(key.user, key.relation, key.object)
```

A CSV file must start with a header row. The columns `user_type`, `user_id`,
`relation`, `object_type` and `object_id` are required; `user_relation`,
`condition_name` and `condition_context` are optional, and
`condition_context` requires `condition_name`. Every row must have as many
fields as the header.

```
user_type,user_id,user_relation,relation,object_type,object_id,condition_name,condition_context
user,anne,,owner,folder,product,inOfficeIP,
folder,product,,parent,folder,product-2021,inOfficeIP,"{""ip_addr"":""10.0.0.1""}"
team,fga,member,viewer,folder,product-2021,,
```

`parse_tuples_from_csv` parses CSV content given as bytes or text.

## Contextual tuples and conditions

```python
from fgacli.tuples import parse_contextual_tuples, parse_query_context, parse_tuple_condition

tuples = parse_contextual_tuples(["user:anne can_view document:2"])
context = parse_query_context('{"ip_addr": "10.0.0.1"}')
condition = parse_tuple_condition("inOfficeIP", '{"ip_addr": "10.0.0.1"}')
```

A contextual tuple is written as `user relation object`, optionally followed
by a JSON condition of the form `{"name": ..., "context": ...}`. A wrong
number of parts raises `fgacli.errors.ValidationError`; malformed JSON raises
`ValueError`.

## Authorization models

```python
from fgacli.authmodel import AuthzModel, ModelFormat

model = AuthzModel()
model.read_from_json_string(
    '{"id":"01GVKXGDCV2SMG6TRE9NMBQ2VG","schema_version":"1.1",'
    '"type_definitions":[{"type":"user"}]}'
)
print(model.get_created_at())            # derived from the model ID
print(model.display_as_json(["id", "created_at"]).to_dict())
```

`ModelFormat.parse` accepts `json`, `fga` and `modular` and raises
`InvalidFormatError` otherwise. `created_at_from_model_id` decodes the
creation time held in a model ID. `read_from_file`,
`read_from_input_file_or_arg` and `read_from_input_file` return a
`ModelInput` holding the model text, its format (inferred from the file name
when left at the default) and a store name taken from the file name.

## Store tests

A store file (YAML) holds tuples or a tuple file and a list of tests with
`check`, `list_objects` and `list_users` assertions; unknown fields are
rejected. Load it with `fgacli.storedata.read_store_file`, then run the tests
with `fgacli.remotetest.run_tests` against any object that implements the
`FgaClient` protocol (`check`, `list_objects`, `list_users`). Exceptions
raised by the client are recorded in the results rather than propagated.

```python
from fgacli.remotetest import run_tests
from fgacli.storedata import read_store_file

_, store_data = read_store_file("store.fga.yaml", ".")
results = run_tests(client, store_data)
print(results.friendly_display())
if not results.is_passing():
    raise SystemExit(1)
```

## Importing tuples

`fgacli.importer.import_tuples` sends writes and deletes through an object
implementing the `TupleWriter` protocol and returns an `ImportResponse`
listing the tuples that succeeded and those that failed, with the part of the
error text from `error message:` onwards as the reason.

## Reading results

`fgacli.readresult.ReadResponse.from_tuples` builds a response from stored
tuples; `to_csv_rows` lays them out in the columns of a CSV tuple file.

## Output

`fgacli.output.new_uni_printer("json" | "yaml" | "csv")` returns a
`UniPrinter` whose `display` method prints data in that format; JSON is
coloured unless the `NO_COLOR` environment variable is set.
`display(data, stream)` writes coloured (or, with `NO_COLOR`, indented) JSON
to a terminal and compact JSON otherwise.

## Confirmation prompts

`fgacli.confirmation.ask_for_confirmation(question)` asks until it reads a
yes or no answer; an empty answer means no.

## Client configuration

`ClientConfig` holds the API URL, store and model IDs and credentials.
`ClientConfig.credentials()` selects token, client-credentials or no
authentication depending on which fields are set:

```python
from fgacli.config import ClientConfig

config = ClientConfig(api_url="http://localhost:8080", api_token="token")
print(config.credentials().method)
```

## What this package does not do

- It has no command-line program; it is a library only.
- It has no network client. `FgaClient` and `TupleWriter` are protocols that
  you implement on top of your own API client.
- It reads authorization models only in JSON. `AuthzModel.read_model_from_string`
  raises `InvalidFormatError` for the `fga` and `modular` formats.
- It cannot evaluate models locally. `run_tests` raises `CliError` when a
  store file defines a model, and runs tests only against the store behind
  the client.