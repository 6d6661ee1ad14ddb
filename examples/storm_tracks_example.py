"""
Example: Working with Storm Track Records in sftime

This example builds a small table of hurricane best-track fixes, tags its
time column, and runs it through spatial operations, conversions and
time-binned plotting.
"""

import matplotlib
matplotlib.use("Agg")

import pandas as pd
from shapely.geometry import box

import sftime as st

# ============================================================================
# Example 1: Build a Feature Table from Date/Time Parts
# ============================================================================

print("="*70)
print("Example 1: Build a Feature Table from Date/Time Parts")
print("="*70)

fixes = pd.DataFrame({
    "name":   ["ALEX"] * 4 + ["BONNIE"] * 4,
    "year":   [2020] * 8,
    "month":  [7, 7, 7, 7, 8, 8, 8, 8],
    "day":    [1, 1, 2, 2, 3, 3, 4, 4],
    "hour":   [0, 12, 0, 12, 0, 12, 0, 12],
    "lon":    [-75.0, -74.1, -73.0, -71.8, -60.0, -62.5, -65.1, -67.9],
    "lat":    [30.0, 31.2, 32.5, 34.0, 15.0, 15.8, 16.9, 18.2],
    "wind":   [35, 45, 60, 50, 40, 55, 75, 90],
})

storms = st.from_dataframe(
    fixes,
    coords=("lon", "lat"),
    crs="EPSG:4326",
    time_parts={"year": "year", "month": "month", "day": "day", "hour": "hour"},
)
print(storms)

# ============================================================================
# Example 2: Spatial Work Keeps the Time Tag
# ============================================================================

print("\n" + "="*70)
print("Example 2: Spatial Work Keeps the Time Tag")
print("="*70)

caribbean = box(-70.0, 10.0, -55.0, 20.0)
in_caribbean = st.spatial_filter(storms, caribbean)
print(f"\nFixes inside the Caribbean box: {len(in_caribbean)}")
print(f"  Time column still active: {in_caribbean.time_column}")

projected = st.transform_crs(storms, "EPSG:3857")
print(f"  Reprojected CRS: {projected.crs.to_string()}, time column: {projected.time_column}")

strong = st.filter_rows(storms, lambda gdf: gdf["wind"] >= 60)
print(f"  Hurricane-strength fixes: {len(strong)}")

# ============================================================================
# Example 3: Time Selection
# ============================================================================

print("\n" + "="*70)
print("Example 3: Time Selection")
print("="*70)

july = st.filter_by_time(storms, ("2020-07-01", "2020-07-31 23:59"))
print(f"\nFixes in July: {len(july)}")
print(f"Time range of full table: {storms.time_range}")

# ============================================================================
# Example 4: Conversions
# ============================================================================

print("\n" + "="*70)
print("Example 4: Conversions")
print("="*70)

print(f"\nFormats into feature tables:  {st.list_formats('to_sftime')}")
print(f"Formats out of feature tables: {st.list_formats('from_sftime')}")

tracks = st.export(st.rename_columns(storms, {"name": "track_name"}), "tracks")
for track_name, track in tracks.tracks.items():
    print(f"  Track {track_name}: {len(track)} fixes")

back = st.convert(tracks, "tracks")
print(f"Round trip through Tracks: {len(back)} rows, time column '{back.time_column}'")

# ============================================================================
# Example 5: Time-Binned Small Multiples
# ============================================================================

print("\n" + "="*70)
print("Example 5: Time-Binned Small Multiples")
print("="*70)

fig, axes = st.plot(storms, "wind", st.TimeBinning(width="1D"), ncols=2)
fig.savefig("storm_panels.png", dpi=100)
print("\nSaved storm_panels.png")

# ============================================================================
# Example 6: Leaving sftime
# ============================================================================

print("\n" + "="*70)
print("Example 6: Leaving sftime")
print("="*70)

plain = st.drop_time(storms)
print(f"\nPlain GeoDataFrame columns: {list(plain.columns)}")
