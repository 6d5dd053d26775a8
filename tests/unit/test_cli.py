import json

import pytest
from unittest.mock import patch

from junapedia.cli import EXIT_INPUT_ERROR, EXIT_NOT_CONFIGURED, EXIT_OK, main


@pytest.fixture
def csv_dir(clean_env):
    directory = clean_env / "csv"
    directory.mkdir()
    (directory / "stores.csv").write_text(
        "Merchant Name,Address,City,Category\n"
        "McDonalds Plaza,Av. Apoquindo 3000,Las Condes,Comida Rápida\n"
        "Mcdonald's Vitacura,Av. Vitacura 5000,Vitacura,Comida Rápida\n"
        "KFC Mall,Av. Kennedy 9001,Las Condes,Comida Rápida\n",
        encoding="utf-8",
    )
    return directory


def _read(path):
    return json.loads(path.read_text(encoding="utf-8"))


def test_csv_to_json_unify_dedupe(csv_dir, clean_env):
    raw = clean_env / "raw.json"
    merged = clean_env / "merged.json"
    deduped = clean_env / "deduped.json"

    assert main(["csv-to-json", "--dir", str(csv_dir), "--out", str(raw)]) == EXIT_OK
    assert len(_read(raw)) == 3

    assert main(["unify", "--input", str(raw), "--out", str(merged)]) == EXIT_OK
    stores = _read(merged)
    assert len(stores) == 2
    assert stores[0]["addresses"] == ["Av. Apoquindo 3000, Las Condes", "Av. Vitacura 5000, Vitacura"]

    assert main(["dedupe", "--input", str(merged), "--out", str(deduped)]) == EXIT_OK
    assert len(_read(deduped)) == 2


def test_unify_with_merge_map(clean_env):
    raw = clean_env / "raw.json"
    raw.write_text(json.dumps([
        {"id": "1", "name": "Juanito Express", "address": "A"},
        {"id": "2", "name": "Juanito", "address": "B"},
    ]), encoding="utf-8")
    merge_map = clean_env / "merge-map.json"
    merge_map.write_text(json.dumps({"Juanito Express": "Juanito"}), encoding="utf-8")
    out = clean_env / "merged.json"

    assert main(["unify", "--input", str(raw), "--merge-map", str(merge_map), "--out", str(out)]) == EXIT_OK
    stores = _read(out)
    assert len(stores) == 1
    assert stores[0]["name"] == "Juanito"


def test_missing_input_exits_1(clean_env):
    assert main(["unify", "--input", str(clean_env / "nope.json")]) == EXIT_INPUT_ERROR
    assert main(["csv-to-json", "--dir", str(clean_env / "nope")]) == EXIT_INPUT_ERROR


def test_verify_without_credentials_exits_2(clean_env):
    assert main(["verify"]) == EXIT_NOT_CONFIGURED


def test_seed_csv_dry_run_writes_rows(csv_dir, clean_env):
    out = clean_env / "seed.json"
    with patch("junapedia.cli.StoreRepository") as repository_cls:
        assert main(["seed-csv", "--dir", str(csv_dir), "--out", str(out)]) == EXIT_OK
        repository_cls.from_settings.assert_not_called()

    rows = _read(out)
    assert len(rows) == 2
    assert all(row["id"].startswith("csv-") for row in rows)
    assert all("seeded_at" in row for row in rows)


def test_seed_csv_confirm_without_credentials_exits_2(csv_dir, clean_env):
    assert main(["seed-csv", "--dir", str(csv_dir), "--confirm"]) == EXIT_NOT_CONFIGURED


def test_seed_csv_confirm_upserts(csv_dir, clean_env, monkeypatch):
    monkeypatch.setenv("CONFIRM", "1")
    with patch("junapedia.cli.StoreRepository") as repository_cls:
        repository = repository_cls.from_settings.return_value
        repository.is_configured = True
        repository.upsert.return_value = 2

        assert main(["seed-csv", "--dir", str(csv_dir), "--batch-size", "50"]) == EXIT_OK

    rows = repository.upsert.call_args.args[0]
    assert len(rows) == 2
    assert repository.upsert.call_args.kwargs == {"batch_size": 50}


def test_extract_comunas_command(clean_env):
    records = clean_env / "deduped.json"
    records.write_text(json.dumps([
        {"id": "1", "addresses": ["Av. Apoquindo 3000, Las Condes"]},
        {"id": "2", "addresses": ["Av. Kennedy 9001, Las Condes"]},
    ]), encoding="utf-8")
    out = clean_env / "comunas.json"

    assert main(["extract-comunas", "--input", str(records), "--out", str(out)]) == EXIT_OK
    assert _read(out)["names"] == ["Las Condes"]


def test_describe_command(clean_env):
    stores = clean_env / "deduped.json"
    stores.write_text(json.dumps([
        {"id": "1", "name": "Unimarc Centro", "category": "Supermercado"},
    ]), encoding="utf-8")
    out = clean_env / "descriptions.json"

    assert main(["describe", "--input", str(stores), "--out", str(out)]) == EXIT_OK
    payload = _read(out)
    assert payload["count"] == 1
    assert "generatedAt" in payload
    assert payload["items"] == [
        {"id": "1", "name": "Unimarc Centro", "description": "Productos de 2 o menos Sellos"},
    ]


def test_seed_csv_keeps_every_branch_address(clean_env):
    directory = clean_env / "csv"
    directory.mkdir()
    lines = ["Merchant Name,Address,City"] + [f"KFC Local {i},Calle {i},Santiago" for i in range(12)]
    (directory / "kfc.csv").write_text("\n".join(lines) + "\n", encoding="utf-8")
    out = clean_env / "seed.json"

    assert main(["seed-csv", "--dir", str(directory), "--out", str(out)]) == EXIT_OK

    rows = _read(out)
    assert len(rows) == 1
    assert len(rows[0]["addresses"]) == 12
    assert len(rows[0]["source_names"]) == 12
    assert "Calle 11, Santiago" in rows[0]["addresses"]


def test_dedupe_dry_run_does_not_touch_repository(clean_env):
    merged = clean_env / "merged.json"
    merged.write_text(json.dumps([
        {"id": "1", "name": "Café Central", "address": "Av. Providencia 100"},
    ]), encoding="utf-8")

    with patch("junapedia.cli.StoreRepository") as repository_cls:
        assert main(["dedupe", "--input", str(merged), "--out", str(clean_env / "deduped.json")]) == EXIT_OK
        repository_cls.from_settings.assert_not_called()


def test_dedupe_confirm_upserts(clean_env):
    merged = clean_env / "merged.json"
    merged.write_text(json.dumps([
        {"id": "1", "name": "Café Central", "address": "Av. Providencia 100"},
        {"id": "2", "name": "Café Central", "address": "Av. Providencia 100"},
        {"id": "3", "name": "Sushi Ñuñoa", "address": "Irarrázaval 2000"},
    ]), encoding="utf-8")
    deduped = clean_env / "deduped.json"

    with patch("junapedia.cli.StoreRepository") as repository_cls:
        repository = repository_cls.from_settings.return_value
        repository.is_configured = True
        repository.upsert.return_value = 2

        assert main([
            "dedupe", "--input", str(merged), "--out", str(deduped),
            "--confirm", "--table", "stores_test", "--batch-size", "100",
        ]) == EXIT_OK

    settings = repository_cls.from_settings.call_args.args[0]
    assert settings.table == "stores_test"
    rows = repository.upsert.call_args.args[0]
    assert len(rows) == len(_read(deduped)) == 2
    assert all("seeded_at" in row for row in rows)
    assert repository.upsert.call_args.kwargs == {"batch_size": 100}


def test_dedupe_confirm_without_credentials_exits_2(clean_env):
    merged = clean_env / "merged.json"
    merged.write_text(json.dumps([{"id": "1", "name": "Café Central", "address": "A"}]), encoding="utf-8")
    assert main(["dedupe", "--input", str(merged), "--confirm"]) == EXIT_NOT_CONFIGURED
