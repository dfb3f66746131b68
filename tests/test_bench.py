import pandas as pd

from editrank import bench


def test_run_strategies_same_results():
    candidates = ["Sol", "Lave", "Leesti", "Diso"]
    results = bench.run_strategies("lave", candidates, ["full_table", "rolling"], k=2)
    assert list(results) == ["full_table", "rolling"]
    assert results["full_table"].items == results["rolling"].items
    assert results["rolling"].texts[0] == "Lave"


def test_results_frame_columns():
    results = bench.run_strategies("lave", ["Lave", "Diso"], ["rolling"], k=5)
    df = bench.results_frame(results)
    assert list(df.columns) == ["strategy", "rank", "text", "score", "elapsed_ms"]
    assert df["rank"].tolist() == [1, 2]


def test_main_on_synthetic_dataset(tmp_path, capsys):
    out = tmp_path / "bench.csv"
    bench.main(["monitoring", "--synthetic", "20", "--random_seed", "1", "--k", "3", "--out", str(out)])

    printed = capsys.readouterr().out
    assert "full_table:" in printed
    assert "rolling:" in printed
    assert "monitoring (100.0%)" in printed

    df = pd.read_csv(out)
    assert set(df["strategy"]) == {"full_table", "rolling"}
    assert len(df) == 6
