"""
App layer: UI 서버 (FastAPI + HTMX).

역할:
- 사진 업로드 화면, 결과/에러 표시
- Gemini provider 호출, 응답 해석 (services/merge.py)

주의: 폴더 구분
- src/app/templates/ → Jinja2 HTML (HTMX)
- src/app/static/ → CSS, JS
"""
