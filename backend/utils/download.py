# Earthdata-backed data source: MERRA-2 (land) and ECCO V4r4 (ocean)
import os
import math
import logging
import threading
from datetime import date, timedelta
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import earthaccess
import xarray as xr

from config import DATA_DIR, LAND_PRODUCTS, OCEAN_PRODUCTS, PRODUCT_LAST_YEAR, load_config
from analysis.errors import UpstreamUnavailable

logger = logging.getLogger("climate.download")

KM_PER_DEG_LAT = 111.0
ECCO_HALF_CELL_DEG = 0.25


def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def point_bbox(lat: float, lon: float, pad_deg: float) -> Tuple[float, float, float, float]:
    """(west, south, east, north) around a point, clipped to the globe."""
    return (max(-180.0, lon - pad_deg), max(-90.0, lat - pad_deg),
            min(180.0, lon + pad_deg), min(90.0, lat + pad_deg))


def buffer_degrees(lat: float, buffer_km: float) -> Tuple[float, float]:
    """Half-sizes (dlat, dlon) in degrees of a km buffer, padded by half an ECCO cell."""
    dlat = buffer_km / KM_PER_DEG_LAT + ECCO_HALF_CELL_DEG
    cos_lat = max(math.cos(math.radians(lat)), 0.01)
    dlon = buffer_km / (KM_PER_DEG_LAT * cos_lat) + ECCO_HALF_CELL_DEG
    return dlat, dlon


def _coord_names(obj) -> Tuple[str, str]:
    lat_name = "lat" if "lat" in obj.coords else "latitude"
    lon_name = "lon" if "lon" in obj.coords else "longitude"
    return lat_name, lon_name


def _nn(x) -> Optional[float]:
    """NaN -> None, otherwise float."""
    x = float(x)
    return None if np.isnan(x) else x


def point_mean(da: xr.DataArray, lat: float, lon: float, start: date, end: date) -> Optional[float]:
    """Time mean at the grid cell nearest to the point."""
    lat_name, lon_name = _coord_names(da)
    da = da.sel({lat_name: lat, lon_name: lon}, method="nearest")
    if "time" in da.dims:
        da = da.sel(time=slice(start.isoformat(), end.isoformat()))
    return _nn(da.mean(skipna=True).values)


def buffered_mean(da: xr.DataArray, lat: float, lon: float, start: date, end: date,
                  buffer_km: float) -> Optional[float]:
    """Mean over every valid surface cell inside the buffer and date range."""
    lat_name, lon_name = _coord_names(da)
    if "Z" in da.dims:
        da = da.isel(Z=0)
    dlat, dlon = buffer_degrees(lat, buffer_km)
    da = da.sel({lat_name: slice(lat - dlat, lat + dlat), lon_name: slice(lon - dlon, lon + dlon)})
    if "time" in da.dims:
        da = da.sel(time=slice(start.isoformat(), end.isoformat()))
    if da.size == 0:
        return None
    return _nn(da.mean(skipna=True).values)


class EarthdataSource:
    """Spatial means straight from NASA Earthdata granules.

    Granules are downloaded once into ``data_dir/<short_name>/<year>`` and
    reused by later queries.
    """

    def __init__(self, data_dir: str = DATA_DIR):
        self.data_dir = data_dir
        self._lock = threading.Lock()
        self._logged_in = False

    # -------- auth --------
    def connect(self) -> None:
        with self._lock:
            if self._logged_in:
                return
            logger.info("🔐 Earthdata login")
            try:
                auth = earthaccess.login(strategy="environment")
            except Exception as e:
                raise UpstreamUnavailable(f"Earthdata login failed: {e}") from e
            if auth is None or not getattr(auth, "authenticated", False):
                raise UpstreamUnavailable(
                    "Earthdata login failed: check EARTHDATA_USERNAME / EARTHDATA_PASSWORD")
            self._logged_in = True

    # -------- granules --------
    def granules(self, short_name: str, version: str, start: date, end: date,
                 bbox: Tuple[float, float, float, float]) -> List[str]:
        out_dir = os.path.join(self.data_dir, short_name, f"{start.year:04d}")
        ensure_dir(out_dir)
        results = earthaccess.search_data(
            short_name=short_name,
            version=version,
            temporal=(start.isoformat(), end.isoformat()),
            bounding_box=bbox,
        )
        if not results:
            logger.debug("No %s granules for %s ~ %s", short_name, start, end)
            return []
        files = earthaccess.download(results, local_path=out_dir)
        return [str(f) for f in files or []]

    def _product_means(self, products: Mapping[str, Tuple[str, str, Dict[str, str]]],
                       variables: Sequence[str], start: date, end: date,
                       bbox: Tuple[float, float, float, float], reduce) -> Dict[str, Optional[float]]:
        out: Dict[str, Optional[float]] = {v: None for v in variables}
        for short_name, version, mapping in products.values():
            wanted = {fv: ev for fv, ev in mapping.items() if ev in variables}
            if not wanted:
                continue
            last = PRODUCT_LAST_YEAR.get(short_name)
            if last is not None and start.year > last:
                logger.debug("%s ends in %d, skipping %s", short_name, last, start)
                continue
            files = self.granules(short_name, version, start, end, bbox)
            if not files:
                continue
            with xr.open_mfdataset(files, engine="netcdf4", combine="by_coords") as ds:
                for file_var, engine_var in wanted.items():
                    if file_var in ds.data_vars:
                        out[engine_var] = reduce(ds[file_var])
        return out

    # -------- data source protocol --------
    def fetch_spatial_mean(self, lat: float, lon: float, start: date, end: date,
                           variables: Sequence[str]) -> Dict[str, Optional[float]]:
        bbox = point_bbox(lat, lon, 0.5)
        return self._product_means(LAND_PRODUCTS, variables, start, end, bbox,
                                   lambda da: point_mean(da, lat, lon, start, end))

    def fetch_ocean_mean(self, lat: float, lon: float, start: date, end: date,
                         variables: Sequence[str], buffer_km: float) -> Dict[str, Optional[float]]:
        dlat, dlon = buffer_degrees(lat, buffer_km)
        bbox = point_bbox(lat, lon, max(dlat, dlon))
        return self._product_means(OCEAN_PRODUCTS, variables, start, end, bbox,
                                   lambda da: buffered_mean(da, lat, lon, start, end, buffer_km))


# -------- CLI --------
def main_cli():
    import argparse
    import json
    p = argparse.ArgumentParser(description="Earthdata data source tools")
    sub = p.add_subparsers(dest="cmd")

    probe = sub.add_parser("probe", help="print one window's spatial means for a point")
    probe.add_argument("lat", type=float, help="latitude")
    probe.add_argument("lon", type=float, help="longitude")
    probe.add_argument("date", help="center date YYYY-MM-DD")
    probe.add_argument("--ocean", action="store_true", help="ocean variables with the coastal buffer")
    probe.add_argument("--data-dir", default=DATA_DIR, help="granule cache root")

    args = p.parse_args()

    if args.cmd == "probe":
        logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        cfg = load_config()
        center = date.fromisoformat(args.date)
        start = center - timedelta(days=cfg.window_days)
        end = center + timedelta(days=cfg.window_days)
        source = EarthdataSource(args.data_dir)
        source.connect()
        if args.ocean:
            values = source.fetch_ocean_mean(args.lat, args.lon, start, end,
                                             cfg.ocean_variables, cfg.ocean_buffer_km)
        else:
            values = source.fetch_spatial_mean(args.lat, args.lon, start, end, cfg.land_variables)
        print(json.dumps({"start": start.isoformat(), "end": end.isoformat(), "values": values}, indent=2))
        return

    p.print_help()


if __name__ == "__main__":
    main_cli()
