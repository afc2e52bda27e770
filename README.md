# streamclust

Building blocks for clustering data streams, in pure Python with no
third-party dependencies, plus one complete algorithm, `EDMStream`.

## Modules

- `streamclust.point`: `Point`, a weighted feature vector with an index,
  a timestamp, a cost and a cluster assignment. `Point.copy` makes an
  independent copy and `Point.distance_to` gives the Euclidean distance.
- `streamclust.cf_tree`: clustering features (`CF`: count, linear sum,
  squared sum), tree nodes (`CFNode`) and the tree limits (`CFTree`) for
  BIRCH-style clustering.
- `streamclust.micro_cluster`: `MicroCluster`, which keeps linear and
  squared sums of points and timestamps. It supports plain insertion
  (`insert`), decayed insertion bounded by a radius (`insert_decayed`),
  fixed-radius insertion (`insert_fixed_radius`), `merge` and `subtract`,
  `relevance_stamp`, `radius_estimate`, `deviation` and
  `inclusion_probability`. The module also has `inverse_error` and
  `quantile`.
- `streamclust.snapshot`: `Snapshot` copies of a set of micro-clusters at
  an elapsed time, with `find_snapshot` (the snapshot closest to a
  landmark time) and `subtract_snapshot` for horizon queries.
- `streamclust.adjusted_weight`: `AdjustedWeight`, a weight decayed
  between updates on a logical or a wall-clock time.
- `streamclust.coreset_tree`: `CoresetTree.union_tree_coreset` reduces two
  weighted point sets to `k` centres by k-means++ style splits.
  `CoresetTree` takes an optional `random.Random` for reproducible runs.
- `streamclust.dp_node`, `streamclust.outlier_reservoir`,
  `streamclust.dp_tree` and `streamclust.cache`: density-peak cells
  (`DPNode`) and their clusters (`DPCluster`), the reservoir for sparse
  cells, the density-ordered `DPTree` and the start-up `Cache`.
- `streamclust.edm_stream`: `EDMStream` and its `EDMStreamParams`, built
  from the pieces above.
- `streamclust.density_grid`, `streamclust.characteristic_vector` and
  `streamclust.grid_cluster`: integer-coordinate grids (`DensityGrid`),
  their density records (`CharacteristicVector`, classified as a
  `GridAttribute`: sparse, transitional or dense) and `GridCluster`s of
  connected grids.

## Example

```python
from streamclust.edm_stream import EDMStream, EDMStreamParams
from streamclust.point import Point

params = EDMStreamParams(
    a=0.998, lamd=1.0, beta=0.001, cache_num=100,
    radius=0.1, min_delta=10.0, opt=2,
)
stream = EDMStream(params)

for i, (features, timestamp) in enumerate(records):
    stream.run_online_clustering(Point(index=i, features=features, timestamp=timestamp))

centres = stream.run_offline_clustering()
```

The first `cache_num` points fill the cache; after that the tree is
built and each point goes to the tree or to the outlier reservoir. The
stream time of a point is its `timestamp` divided by 100000. Every point
whose index is a multiple of 100 retunes the minimum delta.
`run_offline_clustering` returns copies of the centres of all cells in
the current clusters.

## What this package does not do

Only EDMStream is a complete algorithm here. For CluStream, DenStream,
DBStream, BIRCH, StreamKM++ and D-Stream the package gives the data
structures but not the algorithms that drive them. There is no command
line program, no reader for data files, no timing of runs and no
evaluation measures.

## Tests

```
pip install -e .[test]
pytest
```