# backend/fieldbook/services/export/shapefile.py
import shutil
import shapefile  # pyshp
from pyproj import CRS, Transformer
from shapely.geometry import Point
from pathlib import Path
from typing import Iterable, Tuple

# target_epsg: 例 32643 (WGS 84 / UTM zone 43N)

VILLAGE_FIELDS = (
    ("vid", "N", 18, 0),
    ("name", "C", 50, 0),
    ("community", "C", 50, 0),
    ("pop", "N", 10, 0),
    ("area", "N", 18, 3),
)


def village_point(village: dict) -> Point | None:
    lon, lat = village.get("gps_long"), village.get("gps_lat")
    if lon is None or lat is None:
        return None
    pt = Point(lon, lat)
    if not (-180.0 <= pt.x <= 180.0 and -90.0 <= pt.y <= 90.0):
        return None
    return pt


def export_village_points(
    villages: Iterable[dict],
    out_zip: Path,
    target_epsg: int,
    encoding: str = "UTF-8",
) -> int:
    """
    villages: 平坦化済みの村 dict（gps_lat / gps_long は EPSG:4326）
    出力: villages.shp(.shx/.dbf/.prj) を zip 化。書き出した点数を返す
    """
    out_dir = out_zip.parent / out_zip.stem
    out_dir.mkdir(parents=True, exist_ok=True)

    src_crs = CRS.from_epsg(4326)
    dst_crs = CRS.from_epsg(target_epsg)
    tf = Transformer.from_crs(src_crs, dst_crs, always_xy=True)

    def _write_shp(path_base: Path, fields: Tuple[Tuple[str, str, int, int], ...], rows: list[Tuple]):
        w = shapefile.Writer(str(path_base), shapeType=shapefile.POINT)
        w.encoding = encoding
        for f in fields:
            w.field(*f)
        for (x, y), attrs in rows:
            w.point(x, y)
            w.record(*attrs)
        w.close()
        # .prj
        (path_base.with_suffix(".prj")).write_text(dst_crs.to_wkt())

    rows = []
    for v in villages:
        pt = village_point(v)
        if pt is None:
            continue
        xy = tf.transform(pt.x, pt.y)
        attrs = (
            v.get("id"),
            (v.get("name") or "")[:50],
            (v.get("community_name") or "")[:50],
            v.get("population"),
            v.get("area"),
        )
        rows.append((xy, attrs))
    _write_shp(out_dir / "villages", VILLAGE_FIELDS, rows)

    # zip化
    shutil.make_archive(str(out_dir), "zip", root_dir=out_dir)
    Path(str(out_dir) + ".zip").replace(out_zip)
    return len(rows)
