from __future__ import annotations

import os
import threading
import time
from queue import Queue
from typing import Any, Dict, Optional, Tuple

import cv2

from ..events import Action, InputEvent


def _hysteresis_active(value: float, active: bool, on: float, off: float) -> bool:
    # ON 中は低い方の閾値で判定し、ちらつきを防ぐ
    return value >= (off if active else on)


def mouth_openness(shapes: Dict[str, float]) -> Optional[float]:
    # jawOpen、無ければ (1 - mouthClose)
    jaw = shapes.get("jawopen")
    if jaw is not None:
        return float(jaw)
    close = shapes.get("mouthclose")
    if close is not None:
        return float(1.0 - close)
    return None


def smile_amount(shapes: Dict[str, float]) -> Optional[float]:
    # 左右の mouthSmile の平均
    left = shapes.get("mouthsmileleft")
    right = shapes.get("mouthsmileright")
    if left is None or right is None:
        return None
    return float((left + right) / 2.0)


class FaceProvider:
    """
    カメラ映像の表情を入力に変換するプロバイダ。

    - 口を開けている間 -> ACTION1 を押しっぱなし（開けた時に押下、閉じた時に解放）
    - 笑顔 -> ACTION2
    - Escキー -> QUIT
    """

    def __init__(
        self,
        camera_index: int = 0,
        mouth_threshold: float = 0.3,
        smile_threshold: float = 0.5,
        hysteresis: float = 0.05,  # ON/OFFの二段閾値（0で無効）
        frame_width: int = 80,
        frame_height: int = 60,
        note: str = "mediapipe_face",
    ) -> None:
        self._note = note
        self._mouth_on = float(mouth_threshold)
        self._mouth_off = float(max(0.0, mouth_threshold - hysteresis))
        self._smile_on = float(smile_threshold)
        self._smile_off = float(max(0.0, smile_threshold - hysteresis))
        self._mouth_active = False
        self._smile_active = False

        self._cap = cv2.VideoCapture(camera_index)
        if not self._cap.isOpened():
            raise RuntimeError(f"Cannot open camera index {camera_index}.")
        self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, frame_width)
        self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, frame_height)

        self._time_base = time.monotonic()
        self._lock = threading.Lock()
        # 最新の blendshape 辞書とタイムスタンプだけを保持
        self._latest: Optional[Tuple[Optional[Dict[str, float]], int]] = None
        self._last_ts = -1
        self._running = False
        self._worker: Optional[threading.Thread] = None
        self._detector: Any = None
        self._mp: Any = None

        base_dir = os.path.dirname(os.path.dirname(os.path.dirname(os.path.dirname(__file__))))
        self._model_path = os.path.join(base_dir, "assets", "models", "face_landmarker.task")

    def start(self, _out_queue: Queue | None = None) -> None:
        if self._running:
            return
        if self._detector is None:
            # MediaPipe は重いので使う時に読み込む
            try:
                import mediapipe as mp  # type: ignore
                from mediapipe.tasks import python  # type: ignore
                from mediapipe.tasks.python import vision  # type: ignore
            except Exception as e:
                raise RuntimeError(f"Failed to import MediaPipe: {e}") from e

            options = vision.FaceLandmarkerOptions(
                base_options=python.BaseOptions(model_asset_path=self._model_path),
                output_face_blendshapes=True,
                num_faces=1,
                running_mode=vision.RunningMode.LIVE_STREAM,
                result_callback=self._on_result,
            )
            self._detector = vision.FaceLandmarker.create_from_options(options)
            self._mp = mp

        self._running = True
        self._worker = threading.Thread(target=self._capture_loop, name="FaceProviderWorker", daemon=True)
        self._worker.start()

    def stop(self) -> None:
        self._running = False
        if self._worker and self._worker.is_alive():
            self._worker.join(timeout=1.0)
        self._worker = None
        if self._detector is not None:
            self._detector.close()
            self._detector = None
        if self._cap is not None:
            self._cap.release()
            self._cap = None

    def _capture_loop(self) -> None:
        while self._running:
            ok, frame_bgr = self._cap.read()
            if not ok or frame_bgr is None:
                time.sleep(0.01)
                continue
            rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
            image = self._mp.Image(image_format=self._mp.ImageFormat.SRGB, data=rgb)
            timestamp_ms = int((time.monotonic() - self._time_base) * 1000)
            try:
                self._detector.detect_async(image, timestamp_ms)
            except RuntimeError:
                # タイムスタンプが前後した場合など。次のフレームで再試行
                time.sleep(0.01)

    def _on_result(self, result: Any, _output_image: Any, timestamp_ms: int) -> None:
        shapes: Optional[Dict[str, float]] = None
        blends = getattr(result, "face_blendshapes", None)
        if blends:
            shapes = {
                str(c.category_name).lower(): float(c.score)
                for c in blends[0]
                if getattr(c, "category_name", None) and getattr(c, "score", None) is not None
            }
        with self._lock:
            self._latest = (shapes, timestamp_ms)

    def _take_latest(self) -> Optional[Tuple[Optional[Dict[str, float]], int]]:
        with self._lock:
            latest = self._latest
            if latest is None or latest[1] == self._last_ts:
                return None
            self._last_ts = latest[1]
        return latest

    def poll(self, px, out_queue: Queue) -> None:  # type: ignore[override]
        if px is not None and px.btnp(px.KEY_ESCAPE):
            out_queue.put(InputEvent(action=Action.QUIT, note=self._note))

        if not self._running:
            self.start()

        latest = self._take_latest()
        if latest is None:
            return
        shapes, _ = latest
        self.feed(shapes, out_queue)

    def feed(self, shapes: Optional[Dict[str, float]], out_queue: Queue) -> None:
        """1回分の検出結果から押下・解放イベントを作る"""
        if shapes is None:
            # 顔を見失ったら押しっぱなしを解除する
            if self._mouth_active:
                out_queue.put(InputEvent(action=Action.ACTION1, value=0.0, note=self._note))
            self._mouth_active = False
            self._smile_active = False
            return

        mouth = mouth_openness(shapes)
        if mouth is not None:
            active = _hysteresis_active(mouth, self._mouth_active, self._mouth_on, self._mouth_off)
            if active != self._mouth_active:
                out_queue.put(InputEvent(action=Action.ACTION1, value=1.0 if active else 0.0, note=self._note))
            self._mouth_active = active

        smile = smile_amount(shapes)
        if smile is not None:
            active = _hysteresis_active(smile, self._smile_active, self._smile_on, self._smile_off)
            if active and not self._smile_active:
                out_queue.put(InputEvent(action=Action.ACTION2, note=self._note))
            self._smile_active = active
