import pandas as pd
import pytest

from clean_excel import main


BLOB_PHONE = 'color=Black,specifications="<p>CPU: Octa-core</p><p>GPU: Adreno&nbsp;610</p>",sku=WRONG'
BLOB_TAB = "color=Blue,color=Navy,ram=8GB"


@pytest.fixture
def export_xlsx(tmp_path):
    path = tmp_path / "export.xlsx"
    df = pd.DataFrame(
        {
            "sku": ["PHONEBLACK", "TAB01", ""],
            "name": ["Phone", "Tab", "Loose"],
            "additional_attributes": [BLOB_PHONE, BLOB_TAB, "size=L"],
        }
    )
    with pd.ExcelWriter(path, engine="xlsxwriter") as writer:
        df.to_excel(writer, sheet_name="Products", index=False)
    return path


def test_attrs_with_parent(tmp_path, export_xlsx):
    out = tmp_path / "attrs.xlsx"
    assert main([str(export_xlsx), str(out), "--format=sku-attrs", "--include-parent"]) == 0

    df = pd.read_excel(out, sheet_name="SKU_Attributes", dtype=str, keep_default_na=False)
    assert list(df.columns) == ["SKU", "Attribute", "Value", "ParentSKU"]
    assert list(df.itertuples(index=False, name=None)) == [
        ("PHONEBLACK", "color", "Black", "PHONE"),
        ("PHONEBLACK", "specifications", "CPU: Octa-core\nGPU: Adreno 610", "PHONE"),
        ("PHONEBLACK", "CPU", "Octa-core", "PHONE"),
        ("PHONEBLACK", "GPU", "Adreno 610", "PHONE"),
        ("TAB01", "color", "Blue | Navy", ""),
        ("TAB01", "ram", "8GB", ""),
    ]


def test_wide_default(tmp_path, export_xlsx):
    out = tmp_path / "wide.xlsx"
    assert main([str(export_xlsx), str(out)]) == 0

    df = pd.read_excel(out, sheet_name="Cleaned", dtype=str, keep_default_na=False)
    assert list(df.columns) == ["SKU", "__rowNumber", "color", "specifications", "CPU", "GPU", "ram", "size"]
    assert df["SKU"].tolist() == ["PHONEBLACK", "TAB01", ""]
    assert df["__rowNumber"].tolist() == ["2", "3", "4"]
    assert df["ram"].tolist() == ["", "8GB", ""]


def test_long_spec_only_to_csv(tmp_path, export_xlsx):
    out = tmp_path / "long.csv"
    code = main(
        [str(export_xlsx), str(out), "--format", "long", "--sub-lines", "specOnly", "--blob-col", "additional_attributes"]
    )
    assert code == 0
    text = out.read_text(encoding="utf-8")
    assert text.splitlines()[0] == "SKU,Row,Attribute,Value"
    assert "Octa-core" in text
    assert "TAB01,3,color,Blue | Navy" in text


def test_yaml_config_is_used(tmp_path, export_xlsx):
    out = tmp_path / "from_config.xlsx"
    config_path = tmp_path / "cleaner.yaml"
    config_path.write_text(
        f"input: {export_xlsx.name}\noutput: {out.name}\nformat: attrs\nexcluded_keys: [GPU]\n",
        encoding="utf-8",
    )
    assert main(["--config", str(config_path)]) == 0
    df = pd.read_excel(out, sheet_name="SKU_Attributes", dtype=str, keep_default_na=False)
    assert "GPU" not in df["Attribute"].tolist()
    assert "CPU" in df["Attribute"].tolist()


def test_missing_input_exits_with_error(tmp_path):
    assert main([str(tmp_path / "missing.xlsx"), str(tmp_path / "out.xlsx")]) == 1


def test_missing_identifier_column_in_attrs_mode(tmp_path, export_xlsx):
    out = tmp_path / "out.xlsx"
    assert main([str(export_xlsx), str(out), "--format=attrs", "--sku-col=code"]) == 1
    assert not out.exists()


def test_bad_format_flag(tmp_path, export_xlsx):
    assert main([str(export_xlsx), str(tmp_path / "o.xlsx"), "--format=pivot"]) == 1


def test_no_records_writes_nothing(tmp_path):
    src = tmp_path / "empty.xlsx"
    with pd.ExcelWriter(src, engine="xlsxwriter") as writer:
        pd.DataFrame({"sku": [], "blob": []}).to_excel(writer, index=False)
    out = tmp_path / "out.xlsx"
    assert main([str(src), str(out)]) == 0
    assert not out.exists()
