from tests.util_constant import MOVIE_PAYLOAD, SHOW_TIME


class TestMovieCatalog:
    async def test_create_movie_records_creator(self, client, admin_headers, admin_user):
        resp = await client.post('/api/movies', json=MOVIE_PAYLOAD, headers=admin_headers)

        assert resp.status_code == 201
        movie = resp.json()
        assert movie['title'] == 'Inception'
        assert movie['ticket_price'] == 12.5
        assert movie['created_by'] == admin_user.id

    async def test_ticket_price_defaults_to_ten(self, client, admin_headers):
        payload = {k: v for k, v in MOVIE_PAYLOAD.items() if k != 'ticketPrice'}
        resp = await client.post('/api/movies', json=payload, headers=admin_headers)
        assert resp.json()['ticket_price'] == 10.0

    async def test_create_movie_validates_payload(self, client, admin_headers):
        resp = await client.post(
            '/api/movies', json={**MOVIE_PAYLOAD, 'duration': 0}, headers=admin_headers
        )
        assert resp.status_code == 400

    async def test_non_admin_cannot_create_movie(self, client, buyer_headers):
        resp = await client.post('/api/movies', json=MOVIE_PAYLOAD, headers=buyer_headers)
        assert resp.status_code == 403

    async def test_anonymous_cannot_create_movie(self, client):
        resp = await client.post('/api/movies', json=MOVIE_PAYLOAD)
        assert resp.status_code == 401

    async def test_list_movies_is_public(self, client, movie):
        resp = await client.get('/api/movies')

        assert resp.status_code == 200
        assert [m['id'] for m in resp.json()] == [movie['id']]

    async def test_get_movie_includes_showtimes(self, client, movie, showtime):
        resp = await client.get(f'/api/movies/{movie["id"]}')

        assert resp.status_code == 200
        detail = resp.json()
        assert detail['title'] == movie['title']
        assert [s['id'] for s in detail['showtimes']] == [showtime['id']]
        assert len(detail['showtimes'][0]['available_seats']) == 100

    async def test_get_unknown_movie_is_not_found(self, client):
        resp = await client.get('/api/movies/999')
        assert resp.status_code == 404
        assert resp.json()['detail'] == 'Movie not found'

    async def test_update_movie_changes_only_given_fields(self, client, admin_headers, movie):
        resp = await client.put(
            f'/api/movies/{movie["id"]}',
            json={'title': 'Inception (IMAX)', 'ticketPrice': 15},
            headers=admin_headers,
        )

        assert resp.status_code == 200
        updated = resp.json()
        assert updated['title'] == 'Inception (IMAX)'
        assert updated['ticket_price'] == 15.0
        assert updated['genre'] == movie['genre']
        assert updated['duration'] == movie['duration']

    async def test_update_unknown_movie_is_not_found(self, client, admin_headers):
        resp = await client.put('/api/movies/999', json={'title': 'x'}, headers=admin_headers)
        assert resp.status_code == 404

    async def test_public_showtimes_for_movie(self, client, admin_headers, movie, showtime, later_time):
        await client.post(
            '/api/admin/showtimes',
            json={'movieId': movie['id'], 'time': later_time.isoformat()},
            headers=admin_headers,
        )

        resp = await client.get('/api/movies/showtimes', params={'movieId': movie['id']})

        assert resp.status_code == 200
        showtimes = resp.json()
        assert len(showtimes) == 2
        assert showtimes[0]['id'] == showtime['id']

    async def test_public_showtimes_requires_movie_id(self, client):
        resp = await client.get('/api/movies/showtimes')
        assert resp.status_code == 400


class TestCascadeDelete:
    async def test_delete_movie_removes_showtimes_and_bookings(
        self, client, admin_headers, buyer_headers, movie, showtime
    ):
        booking = (
            await client.post(
                '/api/bookings',
                json={'showtimeId': showtime['id'], 'seats': ['A1']},
                headers=buyer_headers,
            )
        ).json()

        resp = await client.delete(f'/api/movies/{movie["id"]}', headers=admin_headers)

        assert resp.status_code == 200
        assert resp.json() == {'message': 'Movie and related showtimes/bookings removed'}
        assert (await client.get(f'/api/movies/{movie["id"]}')).status_code == 404
        assert (await client.get(f'/api/showtimes/{showtime["id"]}')).status_code == 404
        assert (
            await client.get(f'/api/bookings/{booking["id"]}', headers=buyer_headers)
        ).status_code == 404
        assert (await client.get('/api/bookings/user', headers=buyer_headers)).json() == []

    async def test_delete_movie_leaves_other_movies_alone(self, client, admin_headers, movie, showtime):
        other = (
            await client.post(
                '/api/movies', json={**MOVIE_PAYLOAD, 'title': 'Tenet'}, headers=admin_headers
            )
        ).json()
        other_showtime = (
            await client.post(
                '/api/admin/showtimes',
                json={'movieId': other['id'], 'time': SHOW_TIME.isoformat()},
                headers=admin_headers,
            )
        ).json()

        await client.delete(f'/api/movies/{movie["id"]}', headers=admin_headers)

        assert (await client.get(f'/api/movies/{other["id"]}')).status_code == 200
        resp = await client.get(f'/api/showtimes/{other_showtime["id"]}')
        assert len(resp.json()['available_seats']) == 100

    async def test_delete_unknown_movie_is_not_found(self, client, admin_headers):
        resp = await client.delete('/api/movies/999', headers=admin_headers)
        assert resp.status_code == 404

    async def test_non_admin_cannot_delete_movie(self, client, buyer_headers, movie):
        resp = await client.delete(f'/api/movies/{movie["id"]}', headers=buyer_headers)
        assert resp.status_code == 403


class TestOutOfRangeMovieIds:
    async def test_movie_path_id_beyond_64_bits_is_rejected(self, client, admin_headers):
        huge = 10**30
        assert (await client.get(f'/api/movies/{huge}')).status_code == 400
        assert (
            await client.put(f'/api/movies/{huge}', json={'title': 'x'}, headers=admin_headers)
        ).status_code == 400
        assert (await client.delete(f'/api/movies/{huge}', headers=admin_headers)).status_code == 400

    async def test_showtimes_query_id_beyond_64_bits_is_rejected(self, client):
        resp = await client.get('/api/movies/showtimes', params={'movieId': 10**30})
        assert resp.status_code == 400
