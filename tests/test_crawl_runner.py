import json

import httpx

from laserspec.services.crawl.fetcher import Fetcher
from laserspec.services.crawl.runner import build_settings, collect_targets, run
from laserspec.services.crawl.settings import CrawlSettings

BODOR_PAGE = """
<html><body><main>
  <h1>Bodor P3015</h1>
  <p>Fiber laser source, 3 kW. Working area 3000 x 1500 mm.</p>
</main></body></html>
"""


def page_fetcher(body=BODOR_PAGE, status=200):
    def handler(request):
        return httpx.Response(status, text=body)

    return Fetcher(retries=0, client=httpx.Client(transport=httpx.MockTransport(handler)))


def bodor_settings(**kw):
    data = {"brand": "Bodor", "discover": False, "delay": 0.0}
    data.update(kw)
    return CrawlSettings(**data)


def test_cli_flags_override_environment(monkeypatch):
    monkeypatch.setenv("BRAND", "TRUMPF")
    monkeypatch.setenv("CRAWL_CONCURRENCY", "3")
    monkeypatch.setenv("DRY_RUN", "true")
    monkeypatch.setenv("MAX_THICKNESS_MM", "50")
    settings = build_settings(["--brand", "Bodor", "--no-discover", "--retries", "0"])
    assert settings.brand == "Bodor"
    assert settings.concurrency == 3
    assert settings.dry_run is True
    assert settings.discover is False
    assert settings.retries == 0
    assert settings.thresholds.max_thickness_mm == 50.0
    assert settings.writes_file


def test_defaults(monkeypatch):
    for name in ("BRAND", "DRY_RUN", "OUTPUT", "SEEDS", "IMPORT_URL", "CRAWL_CONCURRENCY", "CRAWL_TIMEOUT",
                 "CRAWL_RETRIES", "CRAWL_DELAY", "CRAWL_DISCOVER", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    settings = build_settings([])
    assert settings.brand is None
    assert settings.import_url == "http://localhost:3000/api/admin/import"
    assert (settings.concurrency, settings.timeout, settings.retries, settings.delay) == (1, 20.0, 2, 0.5)
    assert settings.discover is True
    assert not settings.writes_file


def test_collect_targets_merges_seeds(tmp_path):
    seeds = tmp_path / "seeds.json"
    seeds.write_text(
        json.dumps(
            [
                {"brand": "Bodor", "model": "Dup", "url": "https://www.bodor.com/product/p-series"},
                {"brand": "Bodor", "url": "https://www.bodor.com/product/laser-cutting/c3"},
            ]
        ),
        encoding="utf-8",
    )
    targets = collect_targets(bodor_settings(seeds=str(seeds)), page_fetcher())
    assert [t.model for t in targets] == ["P3015", "A3", "Model"]


def test_dry_run_writes_json(tmp_path):
    out = tmp_path / "out.json"
    code = run(bodor_settings(dry_run=True, output=str(out)), fetcher=page_fetcher())
    assert code == 0
    records = json.loads(out.read_text(encoding="utf-8"))["records"]
    assert [r["model"] for r in records] == ["P3015", "A3"]
    assert records[0]["laser_type"] == "Fiber"
    assert records[0]["power_kw"] == 3.0
    assert records[0]["origin_country"] == "CN"


def test_zero_records_exits_nonzero(tmp_path):
    out = tmp_path / "out.json"
    assert run(bodor_settings(dry_run=True, output=str(out)), fetcher=page_fetcher(status=404)) == 1
    assert not out.exists()


def test_import_mode(tmp_path):
    posted = []

    def handler(request):
        posted.append(json.loads(request.content))
        return httpx.Response(200, json={"success": True, "inserted": 2, "updated": 0})

    client = httpx.Client(transport=httpx.MockTransport(handler))
    assert run(bodor_settings(), fetcher=page_fetcher(), import_client=client) == 0
    assert len(posted[0]["records"]) == 2


def test_import_rejection_exits_nonzero():
    client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200, json={"success": False})))
    assert run(bodor_settings(), fetcher=page_fetcher(), import_client=client) == 1


def test_preview_skips_gate(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    thin_page = "<html><body><h1>Bodor P3015</h1><p>Ask us for a quote.</p></body></html>"
    assert run(bodor_settings(preview=True), fetcher=page_fetcher(thin_page)) == 0
    records = json.loads((tmp_path / "scrape-preview.json").read_text(encoding="utf-8"))["records"]
    assert len(records) == 2
    assert records[0]["power_kw"] is None


def test_malformed_seed_entry_does_not_abort(tmp_path):
    seeds = tmp_path / "seeds.json"
    seeds.write_text(json.dumps([{"brand": "Bodor", "url": 42}]), encoding="utf-8")
    targets = collect_targets(bodor_settings(seeds=str(seeds)), page_fetcher())
    assert [t.model for t in targets] == ["P3015", "A3"]
