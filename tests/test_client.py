import unittest
from unittest.mock import Mock

from cancerscan.api.client import PredictionHttpClient


def _response(status_code: int, payload: dict) -> Mock:
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    return response


class PredictionHttpClientTests(unittest.TestCase):
    def test_predict_uploads_multipart_image(self) -> None:
        session = Mock()
        session.request.return_value = _response(
            200,
            {
                "status": "success",
                "message": "Model is predicted successfully",
                "data": {
                    "id": "abc",
                    "result": "Cancer",
                    "suggestion": "Segera periksa ke dokter!",
                    "createdAt": "2024-01-01T00:00:00.000Z",
                },
            },
        )
        client = PredictionHttpClient(base_url="http://localhost:8080/", session=session)

        data = client.predict(b"jpeg-bytes", filename="scan.jpg")

        self.assertEqual(data["result"], "Cancer")
        method, url = session.request.call_args.args
        kwargs = session.request.call_args.kwargs
        self.assertEqual(method, "post")
        self.assertEqual(url, "http://localhost:8080/predict")
        self.assertEqual(kwargs["files"]["image"], ("scan.jpg", b"jpeg-bytes", "image/jpeg"))
        self.assertEqual(kwargs["timeout"], 30.0)

    def test_failure_payload_raises(self) -> None:
        session = Mock()
        session.request.return_value = _response(
            400, {"status": "fail", "message": "Terjadi kesalahan dalam melakukan prediksi"}
        )
        client = PredictionHttpClient(base_url="http://localhost:8080", session=session)

        with self.assertRaises(RuntimeError) as ctx:
            client.predict(b"bad")
        self.assertIn("Terjadi kesalahan", str(ctx.exception))

    def test_histories_returns_entries(self) -> None:
        session = Mock()
        session.request.return_value = _response(
            200, {"status": "success", "data": [{"id": "abc", "history": {}}]}
        )
        client = PredictionHttpClient(base_url="http://localhost:8080", session=session)

        self.assertEqual(client.histories(), [{"id": "abc", "history": {}}])


if __name__ == "__main__":
    unittest.main()
