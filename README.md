# dicomlens

Measurement overlays, image windowing and series navigation for 2D medical
images, built on NumPy.

## Installation

```
pip install dicomlens
```

For running the tests:

```
pip install "dicomlens[test]"
pytest
```

## What is inside

- `dicomlens.base`: geometry primitives (`Point`, `Rect`, `PainterPath`),
  the `Stage`, `Color` and `ViewType` enums, and the abstract `PathItem`
  base for interactive measurement items, with its `CrossItem` handles and
  `TextItem` label. `TextMarkItem` is a free-text annotation whose label is
  set with `set_label_text`.
- `dicomlens.lines`: `LineItem` (length in mm, once a pixel spacing is set),
  `AngleItem` (angle at a vertex, in degrees) and `ArrowItem`.
- `dicomlens.roi`: `RectItem` and `EllipseItem` regions of interest. They
  report their area in cm², and `recal_pix_info(pixels)` computes the mean,
  the root of the summed squared deviations, the maximum, the minimum and
  the pixel count of the enclosed pixels of a 2-D array (see
  `compute_stats` and `RoiStats`).
- `dicomlens.cobb`: `CobbAngleItem`, the acute angle between two drawn
  lines, with a helper line parallel to the second one.
- `dicomlens.tumor`: `TumorItem`, an outline made of horizontal runs, with
  statistics taken over a volume in the XY, XZ or YZ plane.
- `dicomlens.cliprect`: `ClipRectItem`, a crop rectangle with eight drag
  handles (`NodeName`), their resize cursors (`Cursor`) and a minimum size
  of 300 units.
- `dicomlens.image`: `ImageInstance`, one image built from a NumPy pixel
  array and a dictionary of tags keyed by DICOM keyword. It offers window
  centre/width (default, delta, region and full-range windows), `Polarity`,
  `Photometric` interpretation, pixel lookup, pixel spacing, rendering to an
  8-bit grey array and clipping with rotation and flips.
- `dicomlens.series`: `SeriesInstance`, images of one series ordered by
  instance number (`SeriesPattern`), with frame navigation, readable date
  and time tags, a shared window, and rendering in the XY, XZ and YZ planes.
- `dicomlens.thumbnail`: `ThumbnailLabel`, the model of a thumbnail tile
  for a series: scaled preview, patient name, frame tag, highlight, click
  and double-click listeners and a drag payload.

## Examples

A length measurement:

```python
from dicomlens.base import Point
from dicomlens.lines import LineItem

line = LineItem()
line.set_pixel_spacing(0.5, 0.5)
line.set_active_point(Point(30.0, 40.0))
line.next_stage()
line.refresh()
print(line.text_item.text)   # "25.00 mm"
```

Measurement items follow the same interaction model. Each call to
`set_active_point` moves the handle that is being placed. `next_stage`
moves on to the next handle once the current one is in a valid place.
`refresh` updates the colours and, after a handle has moved, recomputes the
path and the label.

An image and a series:

```python
import numpy as np
from dicomlens.base import ViewType
from dicomlens.image import ImageInstance
from dicomlens.series import SeriesInstance

image = ImageInstance(
    pixels=np.arange(16, dtype=np.int16).reshape(4, 4),
    tags={"SeriesInstanceUID": "1.2.3", "InstanceNumber": "1",
          "WindowCenter": "8", "WindowWidth": "16"},
    image_file="slice1.dcm",
)
series = SeriesInstance("1.2.3")
series.insert_image(image)
grey = series.render(ViewType.XY_PLANE)   # 4x4 uint8 array
print(series.frame_count(ViewType.XY_PLANE))   # 1
```

## What it does not do

The package works on data already in memory. It does not read or write
DICOM files: an `ImageInstance` is given its pixel array and tags by the
caller, and `image_file` is only a name used to find and remove images in a
series. It draws nothing on screen either: measurement items, the clip
rectangle and thumbnails keep their geometry, colours and label text, and
rendering returns NumPy arrays for whatever display the caller uses. There
is no command-line program.